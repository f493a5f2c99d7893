"""
Services Layer
Read-side aggregates and file adapters used primarily by routes.

Services should:
- Not modify core data models or business rules
- Go through the lifecycle coordinator for every write
- Read from multiple data models to aggregate information
- Handle adapter concerns (spreadsheet layout, report shapes)
"""
