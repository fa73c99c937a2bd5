"""
Template package.

Turns server template JSON into the immutable evaluation model and back.

Modules of interest:
- schema: pydantic wire models using the template's camelCase names.
- data: ServerTemplateData and the schema <-> model conversion.
"""
