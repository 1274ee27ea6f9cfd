"""
Route blueprints for the civic complaints API.
"""
