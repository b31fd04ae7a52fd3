"""
judge_assignment/routes/__init__.py
Route registration
"""
from fastapi import APIRouter

from judge_assignment.routes import assignments, judge

router = APIRouter()

router.include_router(assignments.router)
router.include_router(judge.router)
