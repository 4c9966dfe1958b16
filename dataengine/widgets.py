"""
Widget renderers.

Host-facing glue that wraps the template processor the way page builder
widgets use it:
- DynamicContent: one template for the current record
- DynamicRepeater: header + one item template per row + footer
- DynamicVisibility: show/hide gate driven by a condition
"""

from typing import Any, Dict, Iterable, Mapping, Optional
import logging

from dataengine.cache import OutputCache
from dataengine.engine.processor import TemplateProcessor

logger = logging.getLogger(__name__)


class CachedWidget:
    """Base for widgets whose output goes through the output cache."""

    def __init__(self, processor: TemplateProcessor, cache: Optional[OutputCache] = None):
        self.processor = processor
        self.cache = cache

    def _cached(self, record_id: Any, widget_id: str, settings: Dict[str, Any], render) -> str:
        if self.cache is None or not self.cache.is_enabled():
            return render()

        key = self.cache.generate_key(record_id, widget_id, settings)
        cached_html = self.cache.get(key)
        if cached_html is not None:
            logger.debug(f"Serving widget {widget_id} from cache")
            return cached_html

        html = render()
        self.cache.set(key, html)
        return html


class DynamicContent(CachedWidget):
    """Renders a single template for a record."""

    def render(self, template: str, record_id: Any = None, widget_id: str = "content") -> str:
        return self._cached(
            record_id,
            widget_id,
            {'template': template},
            lambda: self.processor.process(template, record_id)
        )


class DynamicRepeater(CachedWidget):
    """
    Renders a repeated structure.

    Settings:
        repeater_field_name: Custom field holding the rows
        item_template: Template rendered once per row
        header_template / footer_template: Rendered once around the items
        no_results_template: Rendered when there are no rows
    """

    def render(self, settings: Dict[str, Any], record_id: Any = None, widget_id: str = "repeater") -> str:
        field_name = settings.get('repeater_field_name')
        if not field_name:
            return ''

        def render() -> str:
            return self.render_rows(self.fetch_rows(field_name, record_id), settings, record_id)

        return self._cached(record_id, widget_id, settings, render)

    def fetch_rows(self, field_name: str, record_id: Any = None) -> Any:
        """Rows stored in a custom field; None when the source cannot be read."""
        source = self.processor.sources.get(self.processor.config.SOURCE_CUSTOM)
        if source is None:
            return None

        try:
            return source.get_value(field_name, record_id)
        except Exception as e:
            logger.exception(f"Failed to fetch repeater rows '{field_name}': {e}")
            return None

    def render_rows(
        self,
        rows: Optional[Iterable[Mapping[str, Any]]],
        settings: Dict[str, Any],
        record_id: Any = None
    ) -> str:
        """Render explicitly supplied rows with the repeater settings."""
        if not rows or not isinstance(rows, (list, tuple)):
            return self.processor.process(settings.get('no_results_template', ''), record_id)

        item_template = settings.get('item_template', '')
        items = [
            self.processor.process_loop_item(item_template, row, record_id)
            for row in rows
            if isinstance(row, Mapping)
        ]

        header = self.processor.process(settings.get('header_template', ''), record_id)
        footer = self.processor.process(settings.get('footer_template', ''), record_id)

        return header + ''.join(items) + footer


class DynamicVisibility:
    """Decides whether an element renders, based on a condition."""

    def __init__(self, processor: TemplateProcessor):
        self.processor = processor

    def should_render(self, condition: Optional[str], record_id: Any = None, default: bool = True) -> bool:
        """
        Args:
            condition: Condition string, e.g. "%custom:show_banner% == '1'"
            default: Host decision before the condition is applied

        Returns:
            default when there is no condition, otherwise default and the condition
        """
        if not condition or not condition.strip():
            return default
        return default and self.processor.evaluate_standalone(condition, record_id)
