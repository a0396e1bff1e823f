"""관리자 대화와 사이트 현황 스냅샷으로 AI에게 콘텐츠 변경 계획 후보를 제안받습니다.

제안만 할 뿐 콘텐츠 테이블에는 절대 쓰지 않는다. 실행은 관리자가 승인한 뒤 PlanEngine이 맡는다.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from app.config import settings
from app.models.user import User
from app.schemas.content_hub import CandidatePlan, ProposalResult
from app.services.ai_client import AIClient
from app.utils.content_tables import ALLOWED_TABLES, TABLE_SCHEMAS
from app.utils.permissions import ensure_admin

logger = logging.getLogger(__name__)

PLAN_TOOL_NAME = "content_plan"

DISAMBIGUATION_RULES = """\
- "life periods" / "timeline" / "life chapter" → life_periods (NEVER experiences)
- "supplies" / "equipment" / "materials needed" → supplies_needed
- "client work" / "client projects" → client_projects
- "store products" / "shop items" → products
- "product reviews" / "reviews" → product_reviews
- "learning goals" → learning_goals
- "funding" / "campaigns" → funding_campaigns"""

BEHAVIORAL_RULES = """\
- Always reference existing content by its real id when updating or deleting.
- When creating content, generate slugs from titles (lowercase, hyphenated).
- Never modify content that was not explicitly discussed.
- For updates, only include the fields that are changing.
- To reference a record created earlier in the same plan, use "$ref:<n>" where n is
  the zero-based index of that create action (e.g. {"project_id": "$ref:0"}).
- Use RECENT_AI_CHANGES to avoid duplicating content you recently created.
- Answer questions and reports in plain text; use the content_plan tool only to propose changes."""


def _schema_lines() -> str:
    lines = []
    for table, schema in TABLE_SCHEMAS.items():
        status = f", status field: {schema.status_field}" if schema.status_field else ""
        lines.append(f"- {table.value}: required {', '.join(schema.required_fields)}{status}")
    return "\n".join(lines)


def build_system_prompt(snapshot: Optional[Dict[str, Any]] = None) -> str:
    prompt = (
        "You are an AI content management assistant for a personal portfolio website. "
        "You help the admin manage site content across every content table. "
        "When asked to make changes, you MUST use the content_plan tool to return a structured plan.\n\n"
        f"CONTENT TABLES:\n{_schema_lines()}\n\n"
        f"DISAMBIGUATION RULES:\n{DISAMBIGUATION_RULES}\n\n"
        f"BEHAVIORAL RULES:\n{BEHAVIORAL_RULES}"
    )
    if snapshot:
        prompt += (
            "\n\nCURRENT SITE CONTENT SUMMARY:\n"
            + json.dumps(snapshot, ensure_ascii=False, indent=2, default=str)
        )
    return prompt


def build_plan_tool() -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": PLAN_TOOL_NAME,
            "description": (
                "Create a structured plan to modify site content. Use this whenever the "
                "user asks to create, update, or delete any content."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "title": {"type": "string", "description": "Short title for this plan"},
                    "summary": {"type": "string", "description": "Human-readable summary of what this plan will do"},
                    "actions": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "type": {"type": "string", "enum": ["create", "update", "delete"]},
                                "table": {"type": "string", "enum": list(ALLOWED_TABLES)},
                                "record_id": {"type": "string", "description": "Id of existing record (update/delete) or $ref:<n>"},
                                "data": {"type": "object", "description": "Fields and values to set"},
                                "description": {"type": "string", "description": "Human-readable description of this action"},
                            },
                            "required": ["type", "table", "description"],
                            "additionalProperties": False,
                        },
                    },
                },
                "required": ["title", "summary", "actions"],
                "additionalProperties": False,
            },
        },
    }


class ContentPlanProposer:
    def __init__(self, client: Optional[AIClient] = None):
        self.client = client

    def _client_for(self, actor: User) -> AIClient:
        return self.client or AIClient(user_id=str(actor.user_id))

    def _parse_plans(self, completion) -> List[CandidatePlan]:
        plans: List[CandidatePlan] = []
        for call in completion.tool_calls:
            if call.name != PLAN_TOOL_NAME:
                continue
            try:
                plans.append(CandidatePlan.model_validate(call.parsed_arguments()))
            except (json.JSONDecodeError, PydanticValidationError) as exc:
                logger.warning("[content-hub] discarded malformed plan tool call: %s", exc)
        return plans

    def propose(
        self,
        actor: User,
        history: List[Dict[str, str]],
        snapshot: Optional[Dict[str, Any]] = None,
    ) -> ProposalResult:
        ensure_admin(actor)
        messages = [
            {"role": m["role"], "content": m["content"]}
            for m in history
            if m.get("role") in ("user", "assistant") and m.get("content")
        ]
        system_prompt = build_system_prompt(snapshot)
        completion = self._client_for(actor).complete(messages, system_prompt, tools=[build_plan_tool()])
        if settings.CONTENT_HUB_DEBUG_MODE:
            logger.info(
                "[content-hub][debug] model=%s text=%s tool_calls=%s",
                completion.model, completion.text[:2000], [c.arguments[:2000] for c in completion.tool_calls],
            )

        plans = self._parse_plans(completion)
        if plans:
            reply = completion.text or plans[0].summary
            return ProposalResult(kind="plan", reply=reply, plans=plans)
        return ProposalResult(kind="reply", reply=completion.text)
