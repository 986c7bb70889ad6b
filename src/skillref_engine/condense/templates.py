"""Hand-authored reference generators.

These produce mostly static content: a review checklist, tsconfig
project templates, a one-line-per-option tsconfig reference, and the
SKILL.md router. Their output is hashed into the manifest, so it must
stay byte-stable.
"""

from __future__ import annotations

import json
import re
from typing import Sequence

from skillref_engine.condense.classify import RIGHT, WRONG
from skillref_engine.condense.rules import extract_code_examples, extract_rules, rule_prefix
from skillref_engine.extract.document import get_title
from skillref_engine.extract.models import Document

RULES_SOURCE_MARKER = "Do's and Don'ts"
MAX_PAIRS = 3
MAX_PAIR_LINES = 5

_REVIEW_CHECKLIST = [
    "# TypeScript Code Review Checklist",
    "",
    "## Strict Mode and Type Safety",
    "- Always enable `strict: true` in tsconfig.json",
    "- Never use `any` — prefer `unknown` and narrow with type guards",
    "- Avoid type assertions (`as`) unless unavoidable; prefer type narrowing",
    "- Use `satisfies` operator to validate types without widening",
    "- Enable `noUncheckedIndexedAccess` for safer array/object access",
    "",
    "## Type Design",
    "- Prefer discriminated unions over optional properties for state variants",
    "- Use `interface` for object shapes that may be extended, `type` for unions/intersections/mapped types",
    "- Prefer `readonly` properties and `ReadonlyArray` for immutable data",
    "- Use branded types for domain values that shouldn't be interchangeable (e.g., UserId vs OrderId)",
    "- Avoid `enum` in most cases — prefer `as const` objects or union types",
    "",
    "## Functions",
    "- Add explicit return types on exported functions",
    "- Use function overloads only when the return type varies by input type",
    "- Prefer generic constraints (`T extends X`) over `any` parameters",
    "- Use `never` for exhaustiveness checks in switch/if-else chains",
    "",
    "## Error Handling",
    "- Type catch clause variables as `unknown`, not `any`",
    "- Create typed error classes or discriminated error unions",
    "- Use `Result<T, E>` patterns for expected failures instead of exceptions",
    "",
    "## Common Anti-Patterns",
    "- Using `Object`, `Function`, `String` (uppercase) instead of `object`, `Function`, `string`",
    "- Overusing type assertions to silence errors instead of fixing types",
    "- Not narrowing union types before access",
    "- Using non-null assertion operator without guarantees",
    "- Ignoring `strictNullChecks` errors with optional chaining when null is a real concern",
    "- Using `@ts-ignore` instead of `@ts-expect-error`",
    "- Barrel files that break tree-shaking",
    "",
    "## Module Best Practices",
    "- Use `nodenext` module resolution for Node.js projects",
    "- Use `bundler` module resolution for frontend bundler projects",
    "- Prefer explicit file extensions in imports for ESM",
    "- Use `type` imports (`import type { X }`) for type-only imports",
    "- Avoid namespace imports when tree-shaking matters",
]


def generate_review_content(
    docs: Sequence[Document],
    rules_source_marker: str = RULES_SOURCE_MARKER,
) -> str:
    """Static review checklist plus rules and short wrong/right pairs from do/don't docs."""
    parts = list(_REVIEW_CHECKLIST)

    for doc in docs:
        if rules_source_marker not in doc.path:
            continue

        rules = extract_rules(doc)
        if not rules:
            continue
        examples = extract_code_examples(doc)

        parts.extend(["", "## Declaration File Rules", ""])
        for rule in rules:
            parts.append(f"{rule_prefix(rule.polarity)}{rule.text}")

        wrong = [e for e in examples if e.annotation == WRONG]
        right = [e for e in examples if e.annotation == RIGHT]
        for i in range(min(len(wrong), MAX_PAIRS)):
            if i >= len(right):
                break
            if wrong[i].lines <= MAX_PAIR_LINES and right[i].lines <= MAX_PAIR_LINES:
                parts.extend([
                    "",
                    "Wrong:", "```ts", wrong[i].code, "```",
                    "Right:", "```ts", right[i].code, "```",
                ])

    return "\n".join(parts)


# ── Project templates ────────────────────────────────────────────────

_EXCLUDE = ["node_modules", "dist"]

_NODE_BACKEND = {
    "compilerOptions": {
        "target": "ES2022",
        "module": "nodenext",
        "moduleResolution": "nodenext",
        "strict": True,
        "esModuleInterop": True,
        "skipLibCheck": True,
        "outDir": "./dist",
        "rootDir": "./src",
        "declaration": True,
        "declarationMap": True,
        "sourceMap": True,
        "resolveJsonModule": True,
        "isolatedModules": True,
        "forceConsistentCasingInFileNames": True,
        "noUncheckedIndexedAccess": True,
    },
    "include": ["src/**/*"],
    "exclude": _EXCLUDE,
}

_REACT_APP = {
    "compilerOptions": {
        "target": "ES2020",
        "module": "preserve",
        "moduleResolution": "bundler",
        "jsx": "react-jsx",
        "strict": True,
        "esModuleInterop": True,
        "skipLibCheck": True,
        "outDir": "./dist",
        "rootDir": "./src",
        "declaration": True,
        "sourceMap": True,
        "isolatedModules": True,
        "forceConsistentCasingInFileNames": True,
        "noUncheckedIndexedAccess": True,
        "lib": ["ES2020", "DOM", "DOM.Iterable"],
    },
    "include": ["src/**/*"],
    "exclude": _EXCLUDE,
}

_LIBRARY = {
    "compilerOptions": {
        "target": "ES2020",
        "module": "nodenext",
        "moduleResolution": "nodenext",
        "strict": True,
        "esModuleInterop": True,
        "skipLibCheck": True,
        "outDir": "./dist",
        "rootDir": "./src",
        "declaration": True,
        "declarationMap": True,
        "sourceMap": True,
        "isolatedModules": True,
        "forceConsistentCasingInFileNames": True,
        "noUncheckedIndexedAccess": True,
    },
    "include": ["src/**/*"],
    "exclude": ["node_modules", "dist", "**/*.test.ts"],
}

_MONOREPO_BASE = {
    "compilerOptions": {
        "target": "ES2022",
        "module": "nodenext",
        "moduleResolution": "nodenext",
        "strict": True,
        "esModuleInterop": True,
        "skipLibCheck": True,
        "declaration": True,
        "declarationMap": True,
        "sourceMap": True,
        "composite": True,
        "isolatedModules": True,
        "forceConsistentCasingInFileNames": True,
        "noUncheckedIndexedAccess": True,
    },
}


def _json_block(data: dict) -> list[str]:
    return ["```json", json.dumps(data, indent=2), "```"]


def generate_project_templates(docs: Sequence[Document] = ()) -> str:
    """Static tsconfig templates for common project shapes."""
    return "\n".join([
        "# TypeScript Project Templates",
        "",
        "## Node.js Backend (v20+)",
        *_json_block(_NODE_BACKEND),
        "",
        "## React Application (Vite / Bundler)",
        *_json_block(_REACT_APP),
        "",
        "## Library (npm package)",
        *_json_block(_LIBRARY),
        "",
        "## Monorepo (shared base)",
        *_json_block(_MONOREPO_BASE),
        "",
        "Each sub-package extends this base and adds `outDir`, `rootDir`, `references`.",
        "",
        "## Setup Steps",
        "",
        "1. Initialize: `npm init -y && npm install -D typescript`",
        "2. Create tsconfig: choose template above, save as `tsconfig.json`",
        "3. Create `src/` directory with `index.ts`",
        "4. Add scripts to `package.json`:",
        '   - `"build": "tsc"`',
        '   - `"dev": "tsc --watch"`',
        '   - `"typecheck": "tsc --noEmit"`',
        '5. For ESM projects, add `"type": "module"` to `package.json`',
        "6. Install type definitions for dependencies: `npm install -D @types/node`",
    ])


# ── TSConfig option reference ────────────────────────────────────────

OPTION_CATEGORIES = [
    "Type Checking",
    "Modules",
    "Emit",
    "JavaScript Support",
    "Interop Constraints",
    "Language and Environment",
    "Completeness",
    "Other",
]

_CATEGORY_OPTIONS = {
    "Type Checking": [
        "strict", "strictNullChecks", "strictFunctionTypes", "strictBindCallApply",
        "strictPropertyInitialization", "noImplicitAny", "noImplicitThis",
        "noImplicitReturns", "noFallthroughCasesInSwitch", "noUncheckedIndexedAccess",
        "noPropertyAccessFromIndexSignature", "exactOptionalPropertyTypes",
        "noImplicitOverride", "alwaysStrict", "allowUnusedLabels", "allowUnreachableCode",
    ],
    "Modules": [
        "module", "moduleResolution", "baseUrl", "paths", "rootDir", "rootDirs",
        "typeRoots", "types", "resolveJsonModule", "resolvePackageJsonExports",
        "resolvePackageJsonImports", "customConditions", "moduleSuffixes",
        "allowImportingTsExtensions",
    ],
    "Language and Environment": [
        "target", "lib", "jsx", "jsxFactory", "jsxFragmentFactory", "jsxImportSource",
        "experimentalDecorators", "emitDecoratorMetadata", "useDefineForClassFields",
    ],
    "Emit": [
        "outDir", "outFile", "declaration", "declarationMap", "declarationDir",
        "sourceMap", "inlineSourceMap", "inlineSources", "noEmit", "noEmitOnError",
        "removeComments", "importHelpers", "downlevelIteration", "emitBOM", "newLine",
        "stripInternal", "preserveConstEnums", "emitDeclarationOnly", "sourceRoot",
        "mapRoot",
    ],
    "JavaScript Support": ["allowJs", "checkJs", "maxNodeModuleJsDepth"],
    "Interop Constraints": [
        "esModuleInterop", "allowSyntheticDefaultImports",
        "forceConsistentCasingInFileNames", "isolatedModules", "verbatimModuleSyntax",
    ],
    "Completeness": [
        "skipLibCheck", "skipDefaultLibCheck", "composite", "incremental",
        "tsBuildInfoFile", "disableSourceOfProjectReferenceRedirect",
        "disableSolutionSearching", "disableReferencedProjectLoad",
    ],
}

OPTION_CATEGORY = {
    option: category
    for category, options in _CATEGORY_OPTIONS.items()
    for option in options
}

_DEFAULT_RE = re.compile(r"(?:default|Default)[:\s]+`?([^`\n]+)`?", re.IGNORECASE)


def condense_tsconfig_option(doc: Document) -> str:
    """One reference line for a tsconfig option doc."""
    display = doc.frontmatter.get("display") or get_title(doc)
    oneline = doc.frontmatter.get("oneline") or ""
    match = _DEFAULT_RE.search(doc.raw_body)
    default = match.group(1).strip() if match else ""

    line = f"- **{display}**"
    if oneline:
        line += f": {oneline}"
    if default:
        line += f" Default: `{default}`."
    return line


def generate_tsconfig_reference(docs: Sequence[Document]) -> str:
    """Option lines grouped by category, sorted within each category."""
    categories: dict[str, list[str]] = {name: [] for name in OPTION_CATEGORIES}
    for doc in docs:
        option = doc.path.rsplit("/", 1)[-1].removesuffix(".md")
        category = OPTION_CATEGORY.get(option, "Other")
        categories.setdefault(category, []).append(condense_tsconfig_option(doc))

    parts = ["# TSConfig Options Reference", ""]
    for category, options in categories.items():
        if not options:
            continue
        parts.extend([f"## {category}", "", *sorted(options), ""])
    return "\n".join(parts)


# ── SKILL.md router ──────────────────────────────────────────────────

_SKILL_TEMPLATE = """---
name: typescript
description: >-
  Create, review, and set up TypeScript projects using official TypeScript
  documentation best practices. Use for generating idiomatic TypeScript code,
  reviewing code for type safety issues, or scaffolding new projects with
  correct tsconfig.json configuration.
user-invocable: true
argument-hint: "<create|review|setup> [description]"
---

# TypeScript Skill

Built from [{source_repo}](https://github.com/{source_repo}) at commit `{short_commit}`.

## Mode Selection

Parse the arguments to determine mode:
- If arguments start with **create**: generate TypeScript code (see CREATE mode)
- If arguments start with **review**: review TypeScript code in context (see REVIEW mode)
- If arguments start with **setup**: set up a TypeScript project (see SETUP mode)
- If no mode specified: infer from context (existing .ts files → review, no project → setup, otherwise → create)

## Core TypeScript Principles (All Modes)

These principles apply to ALL generated and reviewed code:

1. **Strict mode always**: `strict: true` is non-negotiable
2. **No `any`**: Use `unknown` and narrow with type guards, assertions, or conditional types
3. **Discriminated unions**: Prefer tagged unions over optional properties for variant states
4. **`interface` vs `type`**: Use `interface` for extendable object shapes, `type` for unions, intersections, mapped types
5. **Explicit exports**: Add explicit return types on all exported functions
6. **`const` assertions**: Use `as const` for literal types, `satisfies` to validate without widening
7. **Type narrowing**: Prefer `typeof`, `instanceof`, `in`, and custom type predicates over assertions
8. **`never` for exhaustiveness**: Use `never` in default branches to catch unhandled cases
9. **`readonly` by default**: Prefer `readonly` properties and `ReadonlyArray<T>` for immutable data
10. **Template literal types**: Use for string patterns (event names, API routes, CSS values)
11. **Generic constraints**: Always constrain generics (`T extends X`) rather than using `any`
12. **Error typing**: Catch as `unknown`, create typed error hierarchies or Result types
13. **Module imports**: Use `import type {{ X }}` for type-only imports
14. **`noUncheckedIndexedAccess`**: Recommend enabling for safer array/object access
15. **Avoid enums**: Prefer `as const` objects or string literal unions over `enum`

## CREATE Mode

When generating TypeScript code:

1. Read the description from the arguments
2. Load relevant reference files based on the task:
   - Types/narrowing → read `refs/type-system-core.md`
   - Functions/classes/generics → read `refs/functions-and-classes.md`
   - Advanced types (mapped, conditional, template literal) → read `refs/type-manipulation.md`
   - Utility types → read `refs/utility-types.md`
   - Modules/imports → read `refs/modules-and-namespaces.md`
   - Declaration files → read `refs/declaration-files.md`
3. Generate code following these patterns:
   - Use descriptive generic names (`TItem`, `TResult`) not single letters except for trivial cases
   - Add JSDoc on exported items with `@param`, `@returns`, `@example`
   - Handle edge cases with type narrowing, not assertions
   - Use `satisfies` for configuration objects
   - Prefer `Map`/`Set` over plain objects when keys are dynamic
   - Use `unknown` in catch clauses
4. Output complete, compilable TypeScript code (not snippets)

## REVIEW Mode

When reviewing TypeScript code:

1. Read the files in the current working directory or the specified files
2. Load `refs/code-review-checklist.md` for the full checklist
3. Check for issues in order of severity:

**Critical** (type safety violations):
- Use of `any` (suggest `unknown` + narrowing)
- Missing `strict: true` in tsconfig
- Type assertions (`as X`) hiding real type errors
- `@ts-ignore` without justification (suggest `@ts-expect-error`)

**Warning** (code quality):
- Missing return types on exported functions
- Enum usage (suggest `as const`)
- Non-null assertions (`!`) without guarantees
- Missing discriminant in union types
- Barrel files that break tree-shaking

**Info** (improvements):
- `type` used where `interface` is more appropriate (or vice versa)
- Missing `readonly` on data that shouldn't mutate
- Missing `import type` for type-only imports
- Opportunities for utility types (`Partial`, `Pick`, `Omit`, etc.)

4. Format the review as:
```
## TypeScript Review: [file(s)]

### Critical Issues
- [file:line] Description and fix

### Warnings
- [file:line] Description and fix

### Suggestions
- [file:line] Description and fix

### Summary
[1-2 sentence overall assessment]
```

## SETUP Mode

When setting up a TypeScript project:

1. Read the project type from arguments (node, react, library, monorepo, or infer)
2. Load `refs/project-templates.md` for tsconfig templates
3. Load `refs/tsconfig-guide.md` for option explanations
4. Determine the correct configuration:
   - **Node.js backend**: `module: "nodenext"`, `target: "ES2022"`
   - **React / bundled frontend**: `module: "preserve"`, `moduleResolution: "bundler"`
   - **Library**: `module: "nodenext"`, `declaration: true`, `declarationMap: true`
   - **Monorepo**: `composite: true`, project references
5. Generate:
   - `tsconfig.json` with comments explaining non-obvious options
   - `src/index.ts` starter file
   - Relevant `package.json` scripts (`build`, `dev`, `typecheck`)
   - `.gitignore` additions for TypeScript artifacts
6. Run `npm install -D typescript` (or detect existing package manager)
7. Verify setup compiles: `npx tsc --noEmit`
"""


def generate_skill_md(source_commit: str, source_repo: str) -> str:
    """Render SKILL.md, embedding the source repo and the 12-char source commit."""
    return _SKILL_TEMPLATE.format(
        source_repo=source_repo,
        short_commit=source_commit[:12],
    )
