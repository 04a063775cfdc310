"""
Pydantic schemas for API request/response validation.
"""
from .todo import TodoCreate, TodoCreatedResponse, TodoListResponse, TodoResponse
