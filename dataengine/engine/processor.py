"""
Template processor for the data engine.

Rendering runs in two phases over the template text:
1. Conditionals: [if]...[elseif]...[else]...[/if] blocks are reduced one
   at a time, leftmost first, until none remain
2. Substitution: one scan where %tag%[fallback]default[/fallback] becomes
   the tag value or the rendered default, and every other
   %source:path|filters% is substituted

Nothing in a pass raises for malformed templates or missing data; problems
are logged and collected as diagnostics.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional
import logging

from dataengine.config import Config
from dataengine.filters import create_default_registry
from dataengine.filters.base import FilterRegistry
from dataengine.parser.ast import ConditionalBlock, FallbackBlock, Tag
from dataengine.parser.lexer import TokenType
from dataengine.parser.parser import TagParser
from dataengine.sources.base import AttachmentStore, DataSource, DataSourceError
from dataengine.values import ResolvedValue, Term
from dataengine.engine.conditions import ConditionEvaluator
from dataengine.engine.resolver import LoopRowContext, ValueResolver

logger = logging.getLogger(__name__)


@dataclass
class Diagnostic:
    """A problem noticed while rendering."""
    level: str
    code: str
    message: str


@dataclass
class RenderResult:
    """
    Output of one rendering pass.

    Attributes:
        output: Rendered text
        diagnostics: Problems noticed during the pass
        stats: Counters (tags_found, tags_resolved, conditionals_evaluated,
               fallbacks_used, filters_applied)
        term_context: Raw taxonomy terms by field name
    """
    output: str
    diagnostics: List[Diagnostic] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)
    term_context: Dict[str, List[Term]] = field(default_factory=dict)


class RenderPass:
    """
    State of a single rendering call.

    Holds the value cache, the term context, diagnostics and stats, so
    concurrent calls on one processor never share mutable state.
    """

    def __init__(
        self,
        processor: 'TemplateProcessor',
        record_id: Any = None,
        row: Optional[LoopRowContext] = None
    ):
        self.parser = processor.parser
        self.filters = processor.filters
        self.locale = processor.locale
        self.max_iterations = processor.max_iterations
        self.record_id = record_id
        self.row = row

        self.resolver = ValueResolver(processor.sources, processor.attachments, processor.row_keyword)
        self.conditions = ConditionEvaluator(self.parser, self.render_tag_text, self.diagnose)

        self.diagnostics: List[Diagnostic] = []
        self.stats = {
            'tags_found': 0,
            'tags_resolved': 0,
            'conditionals_evaluated': 0,
            'fallbacks_used': 0,
            'filters_applied': 0
        }

    def diagnose(self, level: str, code: str, message: str):
        self.diagnostics.append(Diagnostic(level=level, code=code, message=message))

    def run(self, text: str) -> str:
        """Render a template through all phases."""
        return self.render_fragment(text)

    def result(self, output: str) -> RenderResult:
        return RenderResult(
            output=output,
            diagnostics=list(self.diagnostics),
            stats=dict(self.stats),
            term_context=dict(self.resolver.terms)
        )

    def render_fragment(self, text: str) -> str:
        return self.substitute(self.resolve_conditionals(text))

    # Conditionals

    def resolve_conditionals(self, text: str) -> str:
        """
        Reduce conditional blocks until none remain.

        Each step replaces the leftmost complete block by the raw body of
        its chosen branch; blocks nested in that body are reduced by later
        steps. Every step removes one block, and the number of steps is
        capped at max_iterations.
        """
        iterations = 0

        while True:
            block = self.parser.find_conditional_block(text)
            if block is None:
                break

            if iterations >= self.max_iterations:
                message = f"Conditional iteration limit ({self.max_iterations}) reached, remaining blocks left as is"
                logger.warning(message)
                self.diagnose('WARNING', 'iteration_limit', message)
                return text

            iterations += 1
            text = text[:block.position] + self.choose_branch(block) + text[block.end:]

        self._check_leftover_markers(text)
        return text

    def choose_branch(self, block: ConditionalBlock) -> str:
        """Body of the first branch whose condition holds, '' if none."""
        for branch in block.branches:
            if branch.is_else:
                return branch.body

            self.stats['conditionals_evaluated'] += 1
            if self.conditions.evaluate(branch.condition):
                return branch.body

        return ''

    def _check_leftover_markers(self, text: str):
        leftovers = [
            token for token in self.parser.lexer(text).markers()
            if token.type in (TokenType.IF_OPEN, TokenType.IF_CLOSE)
        ]
        if leftovers:
            message = f"Unbalanced conditional marker {leftovers[0].value} left as text"
            logger.warning(message)
            self.diagnose('WARNING', 'unbalanced_block', message)

    # Fallbacks and tags

    def substitute(self, text: str) -> str:
        """
        Substitute fallback blocks and tags in one left-to-right scan.

        Substituted values are never scanned again, so field values and
        fallback output that look like tags stay literal. Leftover
        conditional markers are kept, with the tags inside them rendered.
        """
        parts = []

        for token in self.parser.lexer(text).tokens(include_text=True):
            if token.type == TokenType.FALLBACK:
                parts.append(self.render_fallback(self.parser.parse_fallback(token.value, token.position)))
            elif token.type == TokenType.TAG:
                parts.append(self.render_tag_text(token.value))
            elif token.is_marker:
                parts.append(self.resolve_tags(token.value))
            else:
                parts.append(token.value)

        return ''.join(parts)

    def render_fallback(self, block: FallbackBlock) -> str:
        """
        The tag rendered through the whole pipeline, or the rendered body
        when the tag comes out empty. "0" counts as a value.
        """
        value = self.render_fragment(block.tag_text)
        if value == '':
            self.stats['fallbacks_used'] += 1
            value = self.render_fragment(block.body)
        return value

    def resolve_tags(self, text: str) -> str:
        def replace(match) -> str:
            tag = self.parser.parse_tag(match.group(0), match.start())
            if tag is None:
                return match.group(0)
            return self.render_tag(tag)

        return self.parser.patterns.tag.sub(replace, text)

    def render_tag_text(self, tag_text: str) -> str:
        """Render text holding a single tag (used by conditions)."""
        return self.resolve_tags(tag_text)

    def render_tag(self, tag: Tag) -> str:
        """Resolve, filter and stringify one tag."""
        self.stats['tags_found'] += 1

        try:
            resolved = self.resolver.resolve_tag(tag, self.record_id, self.row)
        except DataSourceError as e:
            message = f"{tag.text}: {e}"
            logger.exception(message)
            self.diagnose('ERROR', 'source_error', message)
            return ''

        if resolved.is_null:
            message = f"Unresolved field: {tag.text}"
            logger.debug(message)
            self.diagnose('DEBUG', 'unresolved_field', message)
        else:
            self.stats['tags_resolved'] += 1

        if not tag.filters:
            return resolved.render()

        value = self.filters.apply(
            resolved.raw,
            tag.filters,
            context=self.filter_context(tag),
            on_diagnostic=self.diagnose
        )
        self.stats['filters_applied'] += sum(1 for f in tag.filters if self.filters.has(f.name))

        return ResolvedValue.of(value).render()

    def filter_context(self, tag: Tag) -> Dict[str, Any]:
        return {
            'locale': self.locale,
            'field_name': tag.field_name,
            'record_id': self.record_id,
            'terms': self.resolver.terms,
            'terms_key': self.resolver.terms_key(tag)
        }


class TemplateProcessor:
    """
    Main entry point for rendering templates.

    Usage:
        processor = TemplateProcessor(sources={
            'custom': DictDataSource({42: {'price': 19.5}}),
            'native': ObjectDataSource({42: post}),
        })
        processor.process('%custom:price|number_format(2)%', record_id=42)  # '19.50'

    Args:
        sources: Data source per source keyword (the row keyword needs none)
        filter_registry: Registry to use (default: built-ins only)
        attachments: Attachment store for inlining SVG content
        config: Config class or instance
        locale: Locale for date/number filters (default: config.LOCALE)
        max_iterations: Conditional reduction cap (default: config value)
    """

    def __init__(
        self,
        sources: Optional[Mapping[str, DataSource]] = None,
        filter_registry: Optional[FilterRegistry] = None,
        attachments: Optional[AttachmentStore] = None,
        config=Config,
        locale: Optional[str] = None,
        max_iterations: Optional[int] = None
    ):
        self.config = config
        self.keywords = (config.SOURCE_CUSTOM, config.SOURCE_NATIVE, config.SOURCE_ROW)
        self.row_keyword = config.SOURCE_ROW
        self.parser = TagParser(self.keywords)

        self.sources: Dict[str, DataSource] = dict(sources or {})
        self.filters = filter_registry or create_default_registry()
        self.attachments = attachments
        self.locale = locale or config.LOCALE
        self.max_iterations = max_iterations if max_iterations is not None else config.MAX_CONDITIONAL_ITERATIONS

    def register_filter(self, name: str, fn: Callable[..., Any]):
        """Add or replace a custom filter on this processor's registry."""
        self.filters.register_filter(name, fn)

    def register_source(self, keyword: str, source: DataSource):
        self.sources[keyword] = source

    def render(
        self,
        text: str,
        record_id: Any = None,
        row_values: Optional[Mapping[str, Any]] = None
    ) -> RenderResult:
        """
        Render a template and report what happened.

        Args:
            text: Template text
            record_id: Record the tags are resolved for
            row_values: Field map of the current loop row, if any

        Returns:
            RenderResult; on an unexpected failure the output is the
            original text
        """
        if not text:
            return RenderResult(output=text or '')

        row = LoopRowContext(row_values, self.row_keyword) if row_values is not None else None
        render_pass = RenderPass(self, record_id, row)

        try:
            output = render_pass.run(text)
        except Exception as e:
            logger.exception(f"Template processing failed: {e}")
            return render_pass.result(text)

        return render_pass.result(output)

    def process(self, text: str, record_id: Any = None) -> str:
        """Render a record-level template."""
        return self.render(text, record_id).output

    def process_loop_item(self, text: str, row_values: Mapping[str, Any], record_id: Any = None) -> str:
        """Render one repeated element; row tags read from row_values."""
        return self.render(text, record_id, row_values or {}).output

    def evaluate_standalone(self, condition: str, record_id: Any = None) -> bool:
        """
        Evaluate a single condition without rendering a template.

        Example: processor.evaluate_standalone("%custom:stock% > '0'", 42)
        """
        render_pass = RenderPass(self, record_id)
        try:
            return render_pass.conditions.evaluate(condition)
        except Exception as e:
            logger.exception(f"Condition evaluation failed: {e}")
            return False

    evaluate = evaluate_standalone

    def extract_tags(self, text: str) -> List[str]:
        """
        Extract all tags from text without processing them.

        Returns:
            List of tag strings found in the text
        """
        return self.parser.extract_tags(text)

    def validate(self, text: str, record_id: Any = None) -> Dict[str, Any]:
        """
        Lint a template without rendering it.

        Reports unbalanced blocks, malformed conditions, unknown filters and
        fields a data source does not know about.

        Returns:
            Dict with 'valid' (bool), 'errors' (list), 'warnings' (list)
        """
        report = self.parser.validate(text)
        errors = list(report['errors'])
        known_fields = {}

        for tag_text in self.extract_tags(text):
            tag = self.parser.parse_tag(tag_text)
            if tag is None:
                continue

            for invocation in tag.filters:
                if not self.filters.has(invocation.name):
                    errors.append(f"Unknown filter '{invocation.name}' in {tag.text}")

            if tag.source == self.row_keyword:
                continue

            source = self.sources.get(tag.source)
            if source is None:
                errors.append(f"No data source for '{tag.source}' in {tag.text}")
                continue

            if tag.source not in known_fields:
                known_fields[tag.source] = {f['name'] for f in source.get_all_known_fields(record_id)}

            names = known_fields[tag.source]
            if names and tag.field_name not in names:
                errors.append(f"Unknown field '{tag.field_name}' in {tag.text}")

        return {
            'valid': not errors,
            'errors': errors,
            'warnings': report['warnings']
        }

    def get_dictionary(self, record_id: Any = None) -> Dict[str, List[Dict[str, Any]]]:
        """
        Fields and filters available to template authors.

        Returns:
            {source_keyword: [{name, label}, ...], 'filters': [{name, args, description}, ...]}
        """
        dictionary = {
            keyword: source.get_all_known_fields(record_id)
            for keyword, source in self.sources.items()
        }
        dictionary['filters'] = self.filters.describe()
        return dictionary
