"""Reconcile Trello labels with the user's existing Vectors tags."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from trello2vectors.context import ImportContext
from trello2vectors.exceptions import StoreError
from trello2vectors.mapping import tag_color_for_label

logger = logging.getLogger(__name__)


@dataclass
class TagMapping:
    """Trello label ID → Vectors tag ID, split by whether the tag was new"""

    created: dict[str, str] = field(default_factory=dict)
    existing: dict[str, str] = field(default_factory=dict)
    errors: list[dict] = field(default_factory=list)

    def resolve(self, label_id: str | None) -> str | None:
        if not label_id:
            return None
        return self.created.get(label_id) or self.existing.get(label_id)

    def resolve_all(self, labels: list[dict] | None) -> list[str]:
        """Tag IDs for a card's labels, in label order; unmapped labels are dropped"""
        tag_ids = []
        for label in labels or []:
            tag_id = self.resolve(label.get("id"))
            if tag_id:
                tag_ids.append(tag_id)
        return tag_ids


def reconcile_tags(labels: list[dict], ctx: ImportContext) -> TagMapping:
    """Match each named label to a tag with the same name, creating tags as needed.

    Names are compared case-insensitively. A tag created here is remembered
    immediately, so two labels with the same name on one board share a tag.
    Labels without a name are skipped. A tag that fails to insert is recorded
    in ``errors`` as ``{"tag": name, "message": ...}`` and skipped; the labels
    pointing at it simply contribute no tag.

    Raises:
        StoreError: If the user's existing tags cannot be loaded
    """
    existing_tags = ctx.store.select("tags", {"user_id": ctx.user_id})
    tags_by_name = {
        tag["name"].lower(): tag for tag in existing_tags if tag.get("name")
    }
    logger.debug("Loaded %d existing tags", len(tags_by_name))

    mapping = TagMapping()

    for label in labels:
        name = label.get("name")
        if not name:
            continue

        key = name.lower()
        if key in tags_by_name:
            mapping.existing[label["id"]] = tags_by_name[key]["id"]
            continue

        try:
            rows = ctx.store.insert(
                "tags",
                [
                    {
                        "name": name,
                        "color": tag_color_for_label(label.get("color")),
                        "user_id": ctx.user_id,
                    }
                ],
            )
        except StoreError as e:
            mapping.errors.append({"tag": name, "message": str(e)})
            logger.warning('Failed to create tag "%s": %s', name, e)
            continue
        if not rows:
            mapping.errors.append({"tag": name, "message": "store returned no row"})
            logger.warning('Failed to create tag "%s": store returned no row', name)
            continue

        tag = rows[0]
        mapping.created[label["id"]] = tag["id"]
        tags_by_name[key] = tag
        logger.debug('Created tag "%s" (%s)', name, tag["id"])

    return mapping
