"""Transaction template suggestions."""

import re
from typing import Any, Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import CashFlowCategory, FinanceType, TransactionTemplate
from ledgerkit.domain.presets import ADDITIONAL_TEMPLATES, TRANSACTION_PRESETS

DATABASE_SOURCE = "database"
PRESET_SOURCE = "preset"
TEMPLATE_LIMIT = 100


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "general"


def build_template_id(
    name: str, finance_type: FinanceType, cash_flow: CashFlowCategory, source: str
) -> str:
    """Stable template ID: ``<source>:<type>:<cash-flow>:<slug>``."""
    return f"{source}:{finance_type.value}:{cash_flow.value}:{slugify(name)}"


def _dedupe_key(template: TransactionTemplate) -> tuple[str, str, str]:
    return (template.finance_type.value, template.cash_flow_category.value, template.name.lower())


def _text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def preset_templates() -> list[TransactionTemplate]:
    """Templates for the preset catalog followed by the built-in extras."""
    templates = [
        TransactionTemplate(
            id=build_template_id(preset.category, preset.finance_type, preset.cash_flow_category, PRESET_SOURCE),
            name=preset.category,
            label=preset.label,
            finance_type=preset.finance_type,
            cash_flow_category=preset.cash_flow_category,
            source=PRESET_SOURCE,
            default_description=preset.default_description,
            preset_key=key,
        )
        for key, preset in TRANSACTION_PRESETS.items()
    ]
    templates.extend(
        TransactionTemplate(
            id=build_template_id(name, finance_type, cash_flow, PRESET_SOURCE),
            name=name,
            label=label,
            finance_type=finance_type,
            cash_flow_category=cash_flow,
            source=PRESET_SOURCE,
            default_description=description,
        )
        for name, label, finance_type, cash_flow, description in ADDITIONAL_TEMPLATES
    )
    return templates


class TemplateService:
    """Service for suggesting transaction templates."""

    def __init__(self, db: Database):
        """Initialize template service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_templates(self, user_id: str) -> list[TransactionTemplate]:
        """List templates for a user.

        The user's own recent (category, type, cash-flow) combinations come
        first, newest first, followed by presets and built-in templates that
        don't duplicate them.
        """
        templates: dict[str, TransactionTemplate] = {}
        for group in self.db.get_category_templates(user_id, limit=TEMPLATE_LIMIT):
            category = _text(group.get("category"))
            finance_type = _text(group.get("finance_type"))
            if category is None or finance_type is None:
                continue
            try:
                finance_type = FinanceType(finance_type.lower())
            except ValueError:
                continue
            try:
                cash_flow = CashFlowCategory((_text(group.get("cash_flow_type")) or "").lower())
            except ValueError:
                cash_flow = CashFlowCategory.OPERATING

            template_id = build_template_id(category, finance_type, cash_flow, DATABASE_SOURCE)
            if template_id in templates:
                continue
            templates[template_id] = TransactionTemplate(
                id=template_id,
                name=category,
                label=category,
                finance_type=finance_type,
                cash_flow_category=cash_flow,
                source=DATABASE_SOURCE,
                default_description=_text(group.get("description")),
            )

        results = list(templates.values())
        seen_keys = {_dedupe_key(template) for template in results}
        seen_ids = set(templates)
        for template in preset_templates():
            key = _dedupe_key(template)
            if key in seen_keys or template.id in seen_ids:
                continue
            seen_keys.add(key)
            seen_ids.add(template.id)
            results.append(template)
        return results
