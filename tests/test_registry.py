"""
Tests for SessionMock Registry

Tests the rule registry including:
- Single-use consumption in registration order
- Repeatable exact rules
- Pattern rules with per-match generators
- Clearing and re-registering
- Atomic consumption under concurrent resolution
"""

import re
import threading

import pytest

from sessionmock.common import InvalidPatternError
from sessionmock.mock import (
    MockRegistry,
    Request,
    ExactOnceRule,
    ExactRepeatableRule,
    PatternRule,
    SuccessResponse,
    FailureResponse,
    build_response,
)


URL = 'https://www.example.com/1'
PRODUCT_PATTERN = r'http://www.example.com/product/([0-9]{6})'


def body_of(resolved):
    return resolved.response.body


class TestSingleUseRules:
    """Test mock_once consumption."""

    def test_responses_returned_in_registration_order(self, registry):
        """Two single-use mocks for one URL answer in order, then nothing."""
        registry.mock_once(URL, body='Test response 1')
        registry.mock_once(URL, body='Test response 2')

        first = registry.resolve(Request(URL))
        second = registry.resolve(Request(URL))
        third = registry.resolve(Request(URL))

        assert body_of(first) == b'Test response 1'
        assert body_of(second) == b'Test response 2'
        assert third is None
        assert len(registry) == 0

    def test_consumed_rule_type(self, registry):
        registry.mock_once(URL, body='x')

        resolved = registry.resolve(URL)

        assert isinstance(resolved.rule, ExactOnceRule)
        assert resolved.request.url == URL

    def test_exhausted_single_use_falls_through_to_repeatable(self, registry):
        """Once the single-use rule is gone, later rules answer."""
        registry.mock_once(URL, body='once')
        registry.mock_always(URL, body='always')

        bodies = [body_of(registry.resolve(URL)) for _ in range(3)]

        assert bodies == [b'once', b'always', b'always']

    def test_earlier_repeatable_shadows_single_use(self, registry):
        """First registered wins, even over a single-use rule."""
        registry.mock_always(URL, body='always')
        registry.mock_once(URL, body='once')

        bodies = [body_of(registry.resolve(URL)) for _ in range(2)]

        assert bodies == [b'always', b'always']
        assert len(registry) == 2

    def test_other_urls_untouched(self, registry):
        """Resolving one URL doesn't consume another URL's mock."""
        registry.mock_once('https://www.example.com/a', body='a')
        registry.mock_once('https://www.example.com/b', body='b')

        assert body_of(registry.resolve('https://www.example.com/b')) == b'b'
        assert [rule.key.url for rule in registry.rules()] == ['https://www.example.com/a']

    def test_concurrent_resolution_consumes_once(self, registry):
        """Racing threads never both win one single-use rule."""
        registry.mock_once(URL, body='only')
        results = []
        results_lock = threading.Lock()
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            resolved = registry.resolve(URL)
            with results_lock:
                results.append(resolved)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        winners = [r for r in results if r is not None]
        assert len(results) == 8
        assert len(winners) == 1
        assert body_of(winners[0]) == b'only'


class TestRepeatableRules:
    """Test mock_always."""

    @pytest.mark.parametrize('count', [1, 3, 10])
    def test_same_response_every_time(self, registry, count):
        registry.mock_always(URL, body='Test response 1')

        bodies = [body_of(registry.resolve(URL)) for _ in range(count)]

        assert bodies == [b'Test response 1'] * count
        assert len(registry) == 1

    def test_method_not_part_of_match(self, registry):
        """Exact rules match on URL alone."""
        registry.mock_always(Request(URL, method='GET'), body='x')

        assert registry.resolve(Request(URL, method='POST')) is not None

    def test_query_string_is_part_of_url(self, registry):
        registry.mock_always(URL, body='x')

        assert registry.resolve(URL + '?page=2') is None

    def test_rule_type(self, registry):
        registry.mock_always(URL, body='x')

        assert isinstance(registry.rules()[0], ExactRepeatableRule)

    def test_unmatched_returns_none(self, registry):
        registry.mock_always(URL, body='x')

        assert registry.resolve('https://www.example.com/2') is None


class TestPatternRules:
    """Test mock_pattern."""

    def test_static_response_for_matching_urls(self, registry):
        """A pattern with a fixed body answers every matching URL."""
        registry.mock_pattern(r'.*/a.json', body="{'mocked':true}")

        first = registry.resolve('http://www.example.com/a.json?param1=1')
        second = registry.resolve('http://www.example.com/a.json?param2=2')

        assert body_of(first) == body_of(second) == b"{'mocked':true}"
        assert registry.resolve('http://www.example.com/b.json') is None
        assert isinstance(first.rule, PatternRule)

    def test_generator_gets_url_and_groups(self, registry):
        calls = []

        def generator(url, groups):
            calls.append((url, groups))
            return build_response(groups[0])

        registry.mock_pattern(PRODUCT_PATTERN, generator)
        registry.resolve('http://www.example.com/product/123456')

        assert calls == [('http://www.example.com/product/123456', ['123456'])]

    def test_each_match_generated_independently(self, registry):
        """Every match uses only its own capture group."""
        registry.mock_pattern(
            PRODUCT_PATTERN,
            lambda url, groups: SuccessResponse(status_code=200, body=groups[0])
        )

        first = registry.resolve('http://www.example.com/product/123456')
        second = registry.resolve('http://www.example.com/product/654321')

        assert body_of(first) == b'123456'
        assert body_of(second) == b'654321'

    def test_generator_runs_at_resolution_time(self, registry):
        calls = []
        registry.mock_pattern(PRODUCT_PATTERN, lambda url, groups: calls.append(url) or build_response())

        assert calls == []
        registry.resolve('http://www.example.com/product/123456')
        assert len(calls) == 1

    def test_generator_failure_response(self, registry):
        """A generator can choose to fail a request."""
        def generator(url, groups):
            if groups[0] == '123456':
                return build_response(groups[0])
            return FailureResponse(error=OSError('Request invalid'))

        registry.mock_pattern(PRODUCT_PATTERN, generator)

        ok = registry.resolve('http://www.example.com/product/123456')
        failed = registry.resolve('http://www.example.com/product/654321')

        assert ok.response.is_failure is False
        assert failed.response.is_failure is True
        assert str(failed.response.error) == 'Request invalid'

    def test_generator_exception_becomes_failure(self, registry):
        """A raising generator is reported as a failed request, not raised."""
        boom = RuntimeError('generator broke')

        def generator(url, groups):
            raise boom

        registry.mock_pattern(PRODUCT_PATTERN, generator)
        resolved = registry.resolve('http://www.example.com/product/123456')

        assert isinstance(resolved.response, FailureResponse)
        assert resolved.response.error is boom

    def test_generator_wrong_return_type_becomes_failure(self, registry):
        registry.mock_pattern(PRODUCT_PATTERN, lambda url, groups: 'not a response')

        resolved = registry.resolve('http://www.example.com/product/123456')

        assert isinstance(resolved.response.error, TypeError)

    def test_unmatched_optional_group_is_empty_string(self, registry):
        captured = []
        registry.mock_pattern(r'/items(/(\d+))?$', lambda url, groups: captured.append(groups) or build_response())

        registry.resolve('https://www.example.com/items')

        assert captured == [['', '']]

    def test_precompiled_pattern(self, registry):
        registry.mock_pattern(re.compile(r'/users/\d+', re.IGNORECASE), body='user')

        assert body_of(registry.resolve('https://api.example.com/USERS/5')) == b'user'

    def test_invalid_pattern_raises(self, registry):
        """Patterns that don't compile fail at registration."""
        with pytest.raises(InvalidPatternError) as exc_info:
            registry.mock_pattern('product/([0-9]{6}', body='x')

        assert exc_info.value.pattern == 'product/([0-9]{6}'
        assert isinstance(exc_info.value, ValueError)
        assert len(registry) == 0

    def test_generator_with_response_keywords_rejected(self, registry):
        with pytest.raises(TypeError):
            registry.mock_pattern(PRODUCT_PATTERN, lambda url, groups: build_response(), status_code=201)


class TestClearAll:
    """Test clear_all."""

    def test_clear_removes_repeatable(self, registry):
        registry.mock_always(URL, body="{'mocked':1}")

        registry.clear_all()

        assert len(registry) == 0
        assert registry.resolve(URL) is None

    def test_reregister_after_clear(self, registry):
        """A new body registered after clearing is what resolves."""
        registry.mock_always(URL, body="{'mocked':1}")
        registry.clear_all()
        registry.mock_always(URL, body="{'mocked':2}")

        assert body_of(registry.resolve(URL)) == b"{'mocked':2}"

    def test_resolved_snapshot_survives_clear(self, registry):
        registry.mock_always(URL, body='kept')
        resolved = registry.resolve(URL)

        registry.clear_all()

        assert body_of(resolved) == b'kept'


class TestRegistration:
    """Test registration helpers."""

    def test_default_delay(self, registry):
        registry.mock_once(URL, body='x')

        assert registry.resolve(URL).delay == 0.25

    def test_explicit_delay(self, registry):
        registry.mock_always(URL, body='x', delay=1)

        assert registry.resolve(URL).delay == 1

    def test_zero_delay_allowed(self, registry):
        registry.mock_always(URL, body='x', delay=0)

        assert registry.resolve(URL).delay == 0

    def test_negative_delay_rejected(self, registry):
        with pytest.raises(ValueError):
            registry.mock_once(URL, body='x', delay=-1)

    def test_custom_default_delay(self):
        registry = MockRegistry(default_delay=0.05)
        registry.mock_once(URL)

        assert registry.resolve(URL).delay == 0.05

    def test_ready_made_response(self, registry):
        response = SuccessResponse(status_code=204)
        registry.mock_once(URL, response)

        assert registry.resolve(URL).response is response

    def test_response_and_keywords_conflict(self, registry):
        with pytest.raises(TypeError):
            registry.mock_once(URL, SuccessResponse(), body='x')

    def test_headers_and_status(self, registry):
        registry.mock_once(URL, body='x', headers={'Content-Type': 'application/test'}, status_code=404)

        response = registry.resolve(URL).response

        assert response.status_code == 404
        assert response.headers['content-type'] == 'application/test'

    def test_duplicate_registration_is_legal(self, registry):
        registry.mock_always(URL, body='first')
        registry.mock_always(URL, body='second')

        assert len(registry) == 2
        assert body_of(registry.resolve(URL)) == b'first'
