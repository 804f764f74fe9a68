# app/api/prompts.py
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api import deps
from app.crud import crud_prompt
from app.models.prompt import DrawingPromptCreate, DrawingPromptPublic

logger = logging.getLogger("app.api.prompts")  # Logger for this module
router = APIRouter()

@router.get("/prompts/random", response_model=DrawingPromptPublic)
def get_random_prompt_api(db: Session = Depends(deps.get_db)):
    """A random prompt from the catalog. Rounds fall back to built-in prompts when it is empty."""
    item = crud_prompt.get_random_prompt(db)
    if not item:
        raise HTTPException(status_code=404, detail="No drawing prompts found in database.")
    return DrawingPromptPublic.model_validate(item)

@router.post("/prompts", response_model=DrawingPromptPublic, status_code=201)
async def create_prompt_via_api(prompt_data: DrawingPromptCreate, db: Session = Depends(deps.get_db)):
    """Adds a prompt to the catalog. Used by scripts/generate_prompts.py."""
    existing = crud_prompt.get_prompt_by_text(db, prompt_data.text)
    if existing:
        logger.warning(f"Attempt to create duplicate drawing prompt: {prompt_data.text}")
        raise HTTPException(status_code=409, detail="This drawing prompt already exists.")

    db_item = crud_prompt.create_prompt(
        db,
        text=prompt_data.text,
        category=prompt_data.category,
        difficulty=prompt_data.difficulty.value,
    )
    logger.info(f"Created drawing prompt {db_item.id}: '{db_item.text}'")
    return db_item
