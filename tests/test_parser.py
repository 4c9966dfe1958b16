"""
Tests for TagParser
"""

from dataengine.parser import TagParser, split_top_level, unquote, ComparisonOp


class TestSplitting:
    """Test quote-aware splitting"""

    def test_split_respects_quotes(self):
        """Test separators inside quotes are kept"""
        assert split_top_level("replace('a|b', 'c')|upper", '|') == ["replace('a|b', 'c')", 'upper']

    def test_split_arguments(self):
        """Test commas inside quoted arguments"""
        assert split_top_level("'a, b', 3", ',') == ["'a, b'", ' 3']

    def test_unquote(self):
        """Test one pair of quotes is stripped"""
        assert unquote(" 'hello' ") == 'hello'
        assert unquote('"x"') == 'x'
        assert unquote('plain') == 'plain'
        assert unquote("'mixed\"") == "'mixed\""


class TestParseTag:
    """Test tag parsing"""

    def setup_method(self):
        self.parser = TagParser(('custom', 'native', 'row'))

    def test_simple_tag(self):
        """Test a bare field"""
        tag = self.parser.parse_tag('%native:title%')

        assert tag.source == 'native'
        assert tag.path == ['title']
        assert tag.field_name == 'title'
        assert tag.properties == []
        assert tag.filters == []

    def test_property_path(self):
        """Test a dotted path"""
        tag = self.parser.parse_tag('%custom:hero_image.url%')

        assert tag.field_name == 'hero_image'
        assert tag.properties == ['url']

    def test_filters_with_arguments(self):
        """Test filter chain parsing"""
        tag = self.parser.parse_tag("%custom:intro|truncate(20, ' [more]')|uppercase%")

        assert [f.name for f in tag.filters] == ['truncate', 'uppercase']
        assert tag.filters[0].args == ['20', ' [more]']
        assert tag.filters[1].args == []

    def test_whitespace_around_pipe(self):
        """Test spaces around the filter separator"""
        tag = self.parser.parse_tag('%custom:price | number_format(2) | append(" EUR")%')

        assert [f.name for f in tag.filters] == ['number_format', 'append']
        assert tag.filters[1].args == [' EUR']

    def test_quoted_comma_argument(self):
        """Test a comma inside a quoted argument"""
        tag = self.parser.parse_tag("%custom:colors|join(', and ')%")
        assert tag.filters[0].args == [', and ']

    def test_unknown_source(self):
        """Test unknown keywords do not parse"""
        assert self.parser.parse_tag('%acf:price%') is None

    def test_extract_tags(self):
        """Test tag extraction"""
        text = "<p>%native:title%</p>[if:%custom:price% > 10]%custom:price|round%[/if]"

        assert self.parser.extract_tags(text) == [
            '%native:title%',
            '%custom:price%',
            '%custom:price|round%'
        ]


class TestParseCondition:
    """Test condition parsing"""

    def setup_method(self):
        self.parser = TagParser(('custom', 'native', 'row'))

    def test_quoted_literal(self):
        """Test a quoted literal"""
        expr = self.parser.parse_condition("%native:status% == 'publish'")

        assert expr.tag_text == '%native:status%'
        assert expr.operator == ComparisonOp.EQ
        assert expr.literal == 'publish'

    def test_unquoted_literal(self):
        """Test an unquoted literal"""
        expr = self.parser.parse_condition('%custom:price% >= 100')

        assert expr.operator == ComparisonOp.GTE
        assert expr.literal == '100'

    def test_word_operators(self):
        """Test contains / not_contains"""
        assert self.parser.parse_condition("%custom:a% contains 'x'").operator == ComparisonOp.CONTAINS
        assert self.parser.parse_condition("%custom:a% not_contains 'x'").operator == ComparisonOp.NOT_CONTAINS

    def test_filters_in_condition_tag(self):
        """Test filters inside the condition tag"""
        expr = self.parser.parse_condition("%custom:name|lowercase% == 'ana'")
        assert expr.tag_text == '%custom:name|lowercase%'

    def test_operator_needs_whitespace(self):
        """Test operators glued to operands are malformed"""
        assert self.parser.parse_condition('%custom:price%>100') is None

    def test_missing_literal(self):
        """Test two-part conditions are malformed"""
        assert self.parser.parse_condition('%custom:price% >') is None


class TestConditionalBlocks:
    """Test block location"""

    def setup_method(self):
        self.parser = TagParser(('custom', 'native', 'row'))

    def test_branches(self):
        """Test branches are split in order"""
        text = "a[if:%custom:p% > 100]P[elseif:%custom:p% > 50]S[else]B[/if]z"
        block = self.parser.find_conditional_block(text)

        assert block.position == 1
        assert text[block.end:] == 'z'
        assert [b.body for b in block.branches] == ['P', 'S', 'B']
        assert block.branches[0].condition == '%custom:p% > 100'
        assert block.branches[2].is_else

    def test_nested_block_stays_in_body(self):
        """Test nested blocks are part of the outer body"""
        text = "[if:%custom:a% == '1']outer[if:%custom:b% == '1']inner[/if]after[/if]"
        block = self.parser.find_conditional_block(text)

        assert len(block.branches) == 1
        assert block.branches[0].body == "outer[if:%custom:b% == '1']inner[/if]after"
        assert block.end == len(text)

    def test_nested_else_not_split(self):
        """Test separators of nested blocks are ignored"""
        text = "[if:%custom:a% == '1'][if:%custom:b% == '1']x[else]y[/if][else]z[/if]"
        block = self.parser.find_conditional_block(text)

        assert [b.body for b in block.branches] == ["[if:%custom:b% == '1']x[else]y[/if]", 'z']

    def test_unclosed_block_skipped(self):
        """Test an unmatched [if:] is skipped"""
        text = "[if:%custom:a% == '1']open [if:%custom:b% == '1']x[/if]"
        block = self.parser.find_conditional_block(text)

        # The first opener has no partner at its depth
        assert block is not None
        assert text[block.position:block.end] == "[if:%custom:b% == '1']x[/if]"

    def test_no_block(self):
        """Test plain text"""
        assert self.parser.find_conditional_block('plain [/if] text') is None


class TestParseFallback:
    """Test fallback block parsing"""

    def setup_method(self):
        self.parser = TagParser(('custom', 'native', 'row'))

    def test_block(self):
        """Test tag, body and span are captured"""
        block = self.parser.parse_fallback('%native:title|upper%[fallback]No title[/fallback]', 10)

        assert block.tag_text == '%native:title|upper%'
        assert block.body == 'No title'
        assert block.position == 10
        assert block.end == 10 + len('%native:title|upper%[fallback]No title[/fallback]')

    def test_not_a_block(self):
        """Test plain tags and partial blocks are rejected"""
        assert self.parser.parse_fallback('%custom:a%') is None
        assert self.parser.parse_fallback('%custom:a%[fallback]x') is None
        assert self.parser.parse_fallback('x %custom:a%[fallback]y[/fallback]') is None


class TestValidate:
    """Test structural validation"""

    def setup_method(self):
        self.parser = TagParser(('custom', 'native', 'row'))

    def test_valid(self):
        """Test a well-formed template"""
        result = self.parser.validate("[if:%custom:a% == '1']x[else]y[/if]")

        assert result['valid'] is True
        assert result['errors'] == []

    def test_unclosed(self):
        """Test an unclosed block"""
        result = self.parser.validate("[if:%custom:a% == '1']x")

        assert result['valid'] is False
        assert '1 unclosed [if] block(s)' in result['errors']

    def test_stray_close(self):
        """Test a stray closing marker"""
        result = self.parser.validate("x[/if]")
        assert result['valid'] is False

    def test_else_outside_block(self):
        """Test [else] outside a block"""
        result = self.parser.validate("x[else]y")
        assert result['valid'] is False

    def test_malformed_condition(self):
        """Test malformed conditions are errors"""
        result = self.parser.validate("[if:%custom:a%==1]x[/if]")

        assert result['valid'] is False
        assert any('Malformed condition' in e for e in result['errors'])

    def test_invalid_filter_part_is_warning(self):
        """Test unparseable filter parts are warnings"""
        result = self.parser.validate('%custom:a|up-per%')

        assert result['valid'] is True
        assert result['warnings']
