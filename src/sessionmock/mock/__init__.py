"""
SessionMock Engine Module

Interception and matching engine for canned HTTP responses.

This module provides:
- Mock rules with single-use, repeatable and pattern policies
- Thread-safe ordered registry with consume-on-match resolution
- Simulated tasks replaying responses through async callbacks
- The interception point deciding mocked vs. live vs. rejected
- YAML/JSON fixture loading
"""

from .request import Request, RequestKey, coerce_request
from .response import SuccessResponse, FailureResponse, ResponseSpec, build_response
from .rules import MockRule, ExactOnceRule, ExactRepeatableRule, PatternRule
from .registry import MockRegistry, ResolvedMock
from .scheduling import Scheduler, ScheduledCall, ThreadingScheduler, DeliveryQueue
from .task import DataTask, SimulatedTask, TaskState, ResponseMetadata
from .interception import (
    InterceptionPoint,
    EvaluationResult,
    CreationOutcome,
    TaskCreation,
    pass_through_evaluator,
    reject_evaluator,
    default_interception,
)
from .fixtures import FixtureLoader, MockDefinition, register_fixtures

__all__ = [
    # Requests and responses
    'Request',
    'RequestKey',
    'coerce_request',
    'SuccessResponse',
    'FailureResponse',
    'ResponseSpec',
    'build_response',

    # Rules and registry
    'MockRule',
    'ExactOnceRule',
    'ExactRepeatableRule',
    'PatternRule',
    'MockRegistry',
    'ResolvedMock',

    # Tasks and scheduling
    'Scheduler',
    'ScheduledCall',
    'ThreadingScheduler',
    'DeliveryQueue',
    'DataTask',
    'SimulatedTask',
    'TaskState',
    'ResponseMetadata',

    # Interception
    'InterceptionPoint',
    'EvaluationResult',
    'CreationOutcome',
    'TaskCreation',
    'pass_through_evaluator',
    'reject_evaluator',
    'default_interception',

    # Fixtures
    'FixtureLoader',
    'MockDefinition',
    'register_fixtures',
]
