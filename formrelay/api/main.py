from fastapi import APIRouter

from formrelay.api.routes import forms

api_router = APIRouter()
api_router.include_router(forms.router)
