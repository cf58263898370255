from .identity import Account, OAuthProvider, User, UserRole
from .playgrounds import Playground, PlaygroundTemplateKind, StarMark, TemplateFile
