from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Tuple

FileTree = Dict[str, Dict[str, Any]]


@dataclass(frozen=True)
class PlaygroundTemplate:
    key: str
    label: str
    description: str
    entry_file: str


def _file(name: str, content: str) -> Dict[str, Any]:
    return {"name": name, "type": "file", "content": content}


def _folder(name: str, *children: Dict[str, Any]) -> Dict[str, Any]:
    return {"name": name, "type": "folder", "children": {child["name"]: child for child in children}}


def _tree(*nodes: Dict[str, Any]) -> FileTree:
    return {node["name"]: node for node in nodes}


def _package_json(payload: Dict[str, Any]) -> Dict[str, Any]:
    return _file("package.json", json.dumps(payload, indent=2))


def _index_html(title: str, mount_id: str, entry: str) -> Dict[str, Any]:
    return _file(
        "index.html",
        f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
</head>
<body>
  <div id="{mount_id}"></div>
  <script type="module" src="{entry}"></script>
</body>
</html>""",
    )


def _build_react_files() -> FileTree:
    return _tree(
        _package_json(
            {
                "name": "react-app",
                "version": "1.0.0",
                "type": "module",
                "scripts": {"dev": "vite", "build": "vite build", "preview": "vite preview"},
                "dependencies": {"react": "^18.2.0", "react-dom": "^18.2.0"},
                "devDependencies": {"@vitejs/plugin-react": "^4.0.0", "vite": "^4.0.0"},
            }
        ),
        _index_html("React App", "root", "/src/main.tsx"),
        _folder(
            "src",
            _file(
                "main.tsx",
                """import React from 'react'
import ReactDOM from 'react-dom/client'
import App from './App'

ReactDOM.createRoot(document.getElementById('root')!).render(
  <React.StrictMode>
    <App />
  </React.StrictMode>,
)""",
            ),
            _file(
                "App.tsx",
                """import { useState } from 'react'

function App() {
  const [count, setCount] = useState(0)

  return (
    <div style={{ padding: '20px', fontFamily: 'Arial' }}>
      <h1>Welcome to React</h1>
      <p>Count: {count}</p>
      <button onClick={() => setCount(count + 1)}>
        Increment
      </button>
    </div>
  )
}

export default App""",
            ),
        ),
    )


def _build_express_files() -> FileTree:
    return _tree(
        _package_json(
            {
                "name": "express-app",
                "version": "1.0.0",
                "type": "module",
                "scripts": {"start": "node src/index.js", "dev": "nodemon src/index.js"},
                "dependencies": {"express": "^4.18.2"},
                "devDependencies": {"nodemon": "^3.0.0"},
            }
        ),
        _folder(
            "src",
            _file(
                "index.js",
                """import express from 'express'
import routes from './routes/index.js'

const app = express()
const PORT = process.env.PORT || 3000

app.use(express.json())
app.use(express.urlencoded({ extended: true }))

app.use('/api', routes)

app.get('/health', (req, res) => {
  res.status(200).json({ message: 'Server is running' })
})

app.use((err, req, res, next) => {
  console.error(err)
  res.status(err.status || 500).json({
    message: err.message || 'Internal server error',
  })
})

app.listen(PORT, () => {
  console.log(`Server running on port ${PORT}`)
})""",
            ),
            _folder(
                "routes",
                _file(
                    "index.js",
                    """import express from 'express'

const router = express.Router()

router.get('/hello', (req, res) => {
  res.status(200).json({ message: 'Hello from Express!' })
})

router.get('/users', (req, res) => {
  res.status(200).json({
    users: [
      { id: 1, name: 'User 1' },
      { id: 2, name: 'User 2' },
    ],
  })
})

export default router""",
                ),
            ),
        ),
    )


def _build_nextjs_files() -> FileTree:
    return _tree(
        _package_json(
            {
                "name": "nextjs-app",
                "version": "1.0.0",
                "scripts": {"dev": "next dev", "build": "next build", "start": "next start", "lint": "next lint"},
                "dependencies": {"next": "^14.0.0", "react": "^18.2.0", "react-dom": "^18.2.0"},
            }
        ),
        _folder(
            "app",
            _file(
                "layout.tsx",
                """import type { Metadata } from 'next'

export const metadata: Metadata = {
  title: 'Next.js App',
  description: 'Generated by create next app',
}

export default function RootLayout({
  children,
}: {
  children: React.ReactNode
}) {
  return (
    <html lang="en">
      <body>{children}</body>
    </html>
  )
}""",
            ),
            _file(
                "page.tsx",
                """'use client'

import { useState } from 'react'

export default function Home() {
  const [count, setCount] = useState(0)

  return (
    <main style={{ padding: '20px', fontFamily: 'Arial' }}>
      <h1>Welcome to Next.js</h1>
      <p>Count: {count}</p>
      <button onClick={() => setCount(count + 1)}>
        Increment
      </button>
    </main>
  )
}""",
            ),
        ),
    )


def _build_vue_files() -> FileTree:
    return _tree(
        _package_json(
            {
                "name": "vue-app",
                "version": "1.0.0",
                "type": "module",
                "scripts": {"dev": "vite", "build": "vite build"},
                "dependencies": {"vue": "^3.0.0"},
                "devDependencies": {"@vitejs/plugin-vue": "^4.0.0", "vite": "^4.0.0"},
            }
        ),
        _index_html("Vue App", "app", "/src/main.ts"),
        _folder(
            "src",
            _file(
                "main.ts",
                """import { createApp } from 'vue'
import App from './App.vue'

createApp(App).mount('#app')""",
            ),
            _file(
                "App.vue",
                """<template>
  <div class="container">
    <h1>Welcome to Vue</h1>
    <p>Count: {{ count }}</p>
    <button @click="count++">Increment</button>
  </div>
</template>

<script setup lang="ts">
import { ref } from 'vue'

const count = ref(0)
</script>

<style scoped>
.container {
  padding: 20px;
  font-family: Arial, sans-serif;
}
</style>""",
            ),
        ),
    )


def _build_hono_files() -> FileTree:
    return _tree(
        _package_json(
            {
                "name": "hono-app",
                "version": "1.0.0",
                "type": "module",
                "scripts": {"dev": "wrangler dev", "deploy": "wrangler deploy"},
                "dependencies": {"hono": "^3.0.0"},
                "devDependencies": {"wrangler": "^3.0.0"},
            }
        ),
        _folder(
            "src",
            _file(
                "index.ts",
                """import { Hono } from 'hono'

const app = new Hono()

app.get('/', (c) => {
  return c.json({ message: 'Hello from Hono!' })
})

app.get('/api/hello', (c) => {
  return c.json({ message: 'Hello API' })
})

export default app""",
            ),
        ),
    )


def _build_angular_files() -> FileTree:
    return _tree(
        _package_json(
            {
                "name": "angular-app",
                "version": "1.0.0",
                "scripts": {"ng": "ng", "start": "ng serve", "build": "ng build"},
                "dependencies": {
                    "@angular/core": "^17.0.0",
                    "@angular/common": "^17.0.0",
                    "@angular/platform-browser": "^17.0.0",
                    "@angular/platform-browser-dynamic": "^17.0.0",
                    "rxjs": "^7.8.0",
                },
                "devDependencies": {"@angular/cli": "^17.0.0", "typescript": "^5.0.0"},
            }
        ),
        _folder(
            "src",
            _file(
                "main.ts",
                """import { bootstrapApplication } from '@angular/platform-browser'
import { AppComponent } from './app/app.component'

bootstrapApplication(AppComponent).catch(err => console.error(err))""",
            ),
            _folder(
                "app",
                _file(
                    "app.component.ts",
                    """import { Component } from '@angular/core'
import { CommonModule } from '@angular/common'

@Component({
  selector: 'app-root',
  standalone: true,
  imports: [CommonModule],
  template: `
    <div style="padding: 20px;">
      <h1>Welcome to Angular</h1>
      <p>Count: {{ count }}</p>
      <button (click)="increment()">Increment</button>
    </div>
  `,
})
export class AppComponent {
  count = 0

  increment() {
    this.count++
  }
}""",
                ),
            ),
        ),
    )


TEMPLATES: List[PlaygroundTemplate] = [
    PlaygroundTemplate(key="REACT", label="React", description="React with Vite", entry_file="src/main.tsx"),
    PlaygroundTemplate(key="NEXTJS", label="Next.js", description="Next.js with App Router", entry_file="app/page.tsx"),
    PlaygroundTemplate(key="EXPRESS", label="Express", description="Express.js backend", entry_file="src/index.js"),
    PlaygroundTemplate(key="VUE", label="Vue", description="Vue 3 with Vite", entry_file="src/main.ts"),
    PlaygroundTemplate(key="HONO", label="Hono", description="Hono - Lightweight web framework", entry_file="src/index.ts"),
    PlaygroundTemplate(key="ANGULAR", label="Angular", description="Angular standalone components", entry_file="src/main.ts"),
]

_BUILDERS: Dict[str, Callable[[], FileTree]] = {
    "REACT": _build_react_files,
    "NEXTJS": _build_nextjs_files,
    "EXPRESS": _build_express_files,
    "VUE": _build_vue_files,
    "HONO": _build_hono_files,
    "ANGULAR": _build_angular_files,
}


def list_templates() -> List[PlaygroundTemplate]:
    return TEMPLATES


def get_template(template_key: str) -> PlaygroundTemplate:
    for template in TEMPLATES:
        if template.key == template_key:
            return template
    raise KeyError(template_key)


def build_template_files(template_key: str) -> FileTree:
    template = get_template(template_key)
    return _BUILDERS[template.key]()


def iter_template_paths(tree: FileTree, prefix: str = "") -> Iterator[Tuple[str, Dict[str, Any]]]:
    """Yield ``(path, node)`` for every file in ``tree``, depth first."""
    for name, node in tree.items():
        path = f"{prefix}{name}"
        if node.get("type") == "folder":
            yield from iter_template_paths(node.get("children") or {}, prefix=f"{path}/")
        else:
            yield path, node
