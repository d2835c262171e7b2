"""Tests for AnalysisRequest validation."""

import pytest

from groupstats.core.exceptions import ValidationError
from groupstats.pipeline import LONG, WIDE, AnalysisRequest


class TestWide:

    def test_constructor(self):
        request = AnalysisRequest.wide('group', 'Control', ['height', 'weight'])
        assert request.layout == WIDE
        assert request.data_columns == ('height', 'weight')

    def test_requires_columns(self):
        with pytest.raises(ValidationError, match="data_columns"):
            AnalysisRequest.wide('group', 'Control', [])

    def test_single_string_rejected(self):
        with pytest.raises(ValidationError, match="single string"):
            AnalysisRequest('group', 'Control', 'height')

    def test_duplicates_rejected(self):
        with pytest.raises(ValidationError, match="duplicate"):
            AnalysisRequest.wide('group', 'Control', ['height', 'height'])

    def test_group_column_not_data(self):
        with pytest.raises(ValidationError, match="group column"):
            AnalysisRequest.wide('group', 'Control', ['group'])

    def test_long_fields_rejected(self):
        with pytest.raises(ValidationError, match="layout='long'"):
            AnalysisRequest('group', 'Control', ('height',), type_column='measure')

    def test_blank_group_column(self):
        with pytest.raises(ValidationError, match="group_column"):
            AnalysisRequest.wide('', 'Control', ['height'])

    def test_frozen(self):
        request = AnalysisRequest.wide('group', 'Control', ['height'])
        with pytest.raises(AttributeError):
            request.control_group = 'Other'


class TestLong:

    def test_constructor(self):
        request = AnalysisRequest.long(
            'group', 'Control', type_column='measure', value_column='value',
        )
        assert request.layout == LONG
        assert request.data_columns == ()

    def test_subset(self):
        request = AnalysisRequest.long(
            'group', 'Control', type_column='measure', value_column='value',
            data_types=['weight'],
        )
        assert request.data_columns == ('weight',)

    def test_requires_type_and_value(self):
        with pytest.raises(ValidationError, match="type_column"):
            AnalysisRequest('group', 'Control', layout=LONG, value_column='value')

    def test_distinct_columns(self):
        with pytest.raises(ValidationError, match="distinct"):
            AnalysisRequest.long('group', 'Control', type_column='group', value_column='value')

    def test_unknown_layout(self):
        with pytest.raises(ValidationError, match="layout"):
            AnalysisRequest('group', 'Control', ('height',), layout='tall')
