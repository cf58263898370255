from typing import List

from fastapi import APIRouter

from codeplay.api.schemas import TemplateResponse
from codeplay.services.playground_templates import list_templates

router = APIRouter()


@router.get("", response_model=List[TemplateResponse])
async def get_templates():
    return [
        TemplateResponse(
            name=template.key,
            label=template.label,
            description=template.description,
            entry_file=template.entry_file,
        )
        for template in list_templates()
    ]
