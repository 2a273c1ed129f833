"""
Pydantic schemas for API request and response validation.

All models derive from CamelModel (schemas/base.py) so the JSON contract is
camelCase while Python code stays snake_case. Recommendation items and stored
payloads are the only places `Any` is used: they are passed through verbatim.
"""
