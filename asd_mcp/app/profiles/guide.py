ALPS_GUIDE = """# ALPS Best Practices

## What Makes a Good ALPS

1. **States = What the user sees** (e.g., ProductList, ProductDetail, Cart)
2. **Transitions = What the user does** (e.g., goProductDetail, doAddToCart)
3. **Self-documenting** - title explains purpose, doc describes behavior
4. **No unreachable states** - every state has an entry point
5. **Necessary and sufficient** - no over-abstraction

## Naming Conventions

| Type | Prefix | Example |
|------|--------|---------|
| Safe transition | `go` | `goProductList`, `goHome` |
| Unsafe transition | `do` | `doCreateUser`, `doAddToCart` |
| Idempotent transition | `do` | `doUpdateUser`, `doDeleteItem` |
| State/Page | PascalCase | `HomePage`, `ProductDetail` |
| Semantic field | camelCase | `userId`, `productName` |

## Three Layers

1. **Ontology** - Semantic descriptors (data fields)
2. **Taxonomy** - State descriptors (screens/pages)
3. **Choreography** - Transition descriptors (safe/unsafe/idempotent)

## Output Format (JSON)

```json
{
  "$schema": "https://alps-io.github.io/schemas/alps.json",
  "alps": {
    "title": "Application Title",
    "doc": {"value": "Description"},
    "descriptor": [
      {"id": "fieldName", "title": "Human Title"},
      {"id": "StateName", "title": "State Title", "descriptor": [
        {"href": "#fieldName"},
        {"href": "#goNextState"}
      ]},
      {"id": "goNextState", "type": "safe", "rt": "#TargetState", "title": "Navigate"}
    ]
  }
}
```

## Important Rules

- Safe transitions (go*) MUST include target state name: `rt="#ProductList"` -> `goProductList`
- Always validate after generation using validate command
- Tags are space-separated strings, not arrays"""
