"""FastAPI router for the grievance form definition, validation, and submission."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from grievance.intake.models import FormData, SubmitResult

router = APIRouter()


# --- Request/Response models ---


class StepValidationResponse(BaseModel):
    step_id: str
    valid: bool
    errors: dict[str, list[str]] = Field(default_factory=dict)


def _wire_errors(errors: dict[str, list[str]] | None) -> dict[str, list[str]] | None:
    """Re-key field errors by the camelCase names the client sends."""
    if errors is None:
        return None
    wired: dict[str, list[str]] = {}
    for key, messages in errors.items():
        try:
            wired[FormData.wire_name(key)] = messages
        except KeyError:
            wired[key] = messages
    return wired


def _rule_params(request: Request) -> dict[str, Any]:
    return {"today": request.app.state.clock.today()}


# --- Form endpoints ---


@router.get("/api/grievances/form")
async def get_form_definition(request: Request) -> dict[str, Any]:
    wizard = request.app.state.wizard_definition
    return wizard.model_dump(mode="json")


@router.post("/api/grievances/validate/{step_id}")
async def validate_step(step_id: str, body: FormData, request: Request) -> StepValidationResponse:
    wizard = request.app.state.wizard_definition
    validation = request.app.state.validation_engine
    try:
        index = wizard.step_index(step_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))

    result = validation.validate_step(wizard.steps[index], body.model_dump(), _rule_params(request))
    return StepValidationResponse(
        step_id=step_id,
        valid=result.valid,
        errors=_wire_errors(result.errors) or {},
    )


@router.post("/api/grievances")
async def submit_grievance(body: FormData, request: Request) -> SubmitResult:
    gateway = request.app.state.gateway
    result = await gateway.submit(body)
    return result.model_copy(update={"errors": _wire_errors(result.errors)})
