"""status-transformer handler - RunFunction over plain request/response dicts.

Request shape (a JSON/YAML rendering of a RunFunctionRequest):

    meta:     {tag: str}
    input:    StatusTransformation
    observed: {composite: {resource: {...}}, resources: {<key>: {resource: {...}}}}
    context:  {"apiextensions.crossplane.io/extra-resources": {<into>: [{...}, ...]}}

Response shape:

    meta:       {tag: str, ttl: "<seconds>s"}
    conditions: [{type, status, reason, message?, target}, ...]
    results:    [{severity, reason?, message, target}, ...]

The handler never raises for bad requests: every failure is reported as a
StatusTransformationSuccess=False condition.
"""

import logging
from typing import Any

from status_transformer.config import StatusTransformerConfig, get_config
from status_transformer.engine import EvaluationResult, HookEvaluator
from status_transformer.errors import ConfigurationError, ResourceAccessError, StatusTransformerError
from status_transformer.input import load_input
from status_transformer.resources import (
    COMPOSITE_RESOURCE_KEY,
    ExtraResource,
    ObservedObject,
    extra_resources_from_context,
    observed_from_unstructured,
)

# Context key written by the extra-resources function
EXTRA_RESOURCES_CONTEXT_KEY = "apiextensions.crossplane.io/extra-resources"

logger = logging.getLogger(__name__)


class StatusTransformerHandler:
    """Runs the status transformation for a request."""

    def __init__(self, config: StatusTransformerConfig | None = None) -> None:
        self.config = config or get_config()
        self.config.configure_logging()

    def run_function(self, request: dict[str, Any]) -> dict[str, Any]:
        """Run the function.

        Args:
            request: RunFunctionRequest as a dict

        Returns:
            RunFunctionResponse as a dict
        """
        meta = (request.get("meta") or {}) if isinstance(request, dict) else {}
        tag = meta.get("tag", "") if isinstance(meta, dict) else ""
        logger.debug("running function (tag: %s)", tag)

        if not isinstance(meta, dict):
            error = ConfigurationError(f"unexpected meta type: {type(meta).__name__}")
            result = _fatal(error, "cannot get meta from RunFunctionRequest")
        else:
            result = self.evaluate_request(request)
        return self.to_response(tag, result)

    def evaluate_request(self, request: dict[str, Any]) -> EvaluationResult:
        """Evaluate a request and return the engine result."""
        if not isinstance(request, dict):
            error = ConfigurationError(f"unexpected request type: {type(request).__name__}")
            return _fatal(error, "cannot read RunFunctionRequest")

        try:
            transformation = load_input(request.get("input"))
        except ConfigurationError as e:
            return _fatal(e, "cannot get Function input from RunFunctionRequest")

        observed_state = request.get("observed") or {}
        try:
            composite = self._get_composite(observed_state)
        except ResourceAccessError as e:
            return _fatal(e, "cannot get observed XR from RunFunctionRequest")

        logger.debug(
            "observed XR: apiVersion=%s kind=%s name=%s", composite.api_version, composite.kind, composite.name
        )

        try:
            observed = observed_from_unstructured(observed_state.get("resources") or {})
        except ResourceAccessError as e:
            return _fatal(e, "cannot get observed resources from RunFunctionRequest")

        context = request.get("context") or {}

        def load_extra_resources() -> list[ExtraResource]:
            if not isinstance(context, dict):
                raise ResourceAccessError(f"unexpected context type: {type(context).__name__}")
            return extra_resources_from_context(context.get(EXTRA_RESOURCES_CONTEXT_KEY))

        evaluator = HookEvaluator(transformation.status_condition_hooks)
        return evaluator.evaluate(observed, composite, load_extra_resources)

    @staticmethod
    def _get_composite(observed_state: Any) -> ObservedObject:
        if not isinstance(observed_state, dict):
            raise ResourceAccessError(f"unexpected observed type: {type(observed_state).__name__}")
        composite = observed_state.get("composite") or {}
        if not isinstance(composite, dict):
            raise ResourceAccessError(f"unexpected composite type: {type(composite).__name__}")
        return ObservedObject.from_unstructured(COMPOSITE_RESOURCE_KEY, composite.get("resource") or {})

    def to_response(self, tag: str, result: EvaluationResult) -> dict[str, Any]:
        """Build a RunFunctionResponse dict from an evaluation result."""
        return {
            "meta": {"tag": tag, "ttl": f"{self.config.response_ttl_seconds}s"},
            "conditions": [c.to_dict() for c in result.conditions],
            "results": [e.to_dict() for e in result.events],
        }


def _fatal(error: StatusTransformerError, message: str) -> EvaluationResult:
    logger.error("%s: %s", message, error)
    return EvaluationResult.fatal(error, message)


def run_function(request: dict[str, Any], config: StatusTransformerConfig | None = None) -> dict[str, Any]:
    """Run the function for a single request (see StatusTransformerHandler)."""
    return StatusTransformerHandler(config).run_function(request)
