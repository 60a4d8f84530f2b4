"""Routes for administering scoped commission and VAT rules."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from rate_rules.application.use_cases.rules import (
    COMMISSION_RULES,
    VAT_RULES,
    RuleFamily,
    RuleLifecycleService,
)
from rate_rules.interfaces.api.dependencies import (
    Actor,
    get_actor,
    lifecycle_service_dependency,
)
from rate_rules.interfaces.api.routes_helpers import raise_for_failure
from rate_rules.interfaces.api.schemas import (
    ResolvedRateRead,
    RuleHistoryRead,
    RuleHistoryResponse,
    ScopedRuleCreate,
    ScopedRuleRead,
    ScopedRuleUpdate,
)


def build_rule_router(family: RuleFamily, *, prefix: str) -> APIRouter:
    """Return the CRUD, resolve and history routes for one rule family."""

    router = APIRouter(prefix=prefix, tags=[f"{family.key}_rules"])
    get_service = lifecycle_service_dependency(family)

    @router.get("/", response_model=list[ScopedRuleRead])
    def list_rules(
        service: RuleLifecycleService = Depends(get_service),
    ) -> list[ScopedRuleRead]:
        """Return every rule of the family, highest priority first."""

        result = service.list_rules()
        raise_for_failure(result)
        return [ScopedRuleRead.from_entity(rule) for rule in result.rules]

    @router.post("/", response_model=ScopedRuleRead, status_code=status.HTTP_201_CREATED)
    def create_rule(
        payload: ScopedRuleCreate,
        actor: Actor = Depends(get_actor),
        service: RuleLifecycleService = Depends(get_service),
    ) -> ScopedRuleRead:
        """Create a rule unless an active rule already covers its scope and window."""

        result = service.create_rule(
            payload.to_command(user_id=actor.user_id, user_email=actor.email)
        )
        raise_for_failure(result)
        return ScopedRuleRead.from_entity(result.rule)

    @router.get("/resolve", response_model=ResolvedRateRead)
    def resolve_rate(
        primary_key: str | None = Query(default=None),
        category_id: str | None = Query(default=None),
        as_of: datetime | None = Query(default=None),
        service: RuleLifecycleService = Depends(get_service),
    ) -> ResolvedRateRead:
        """Return the rule governing the context at ``as_of`` (default: now)."""

        result = service.resolve(primary_key, category_id, as_of)
        raise_for_failure(result)
        return ResolvedRateRead(
            found=result.found,
            rate=result.rate,
            applied_rule=(
                ScopedRuleRead.from_entity(result.applied_rule)
                if result.applied_rule is not None
                else None
            ),
        )

    @router.get("/{rule_id}", response_model=ScopedRuleRead)
    def read_rule(
        rule_id: UUID,
        service: RuleLifecycleService = Depends(get_service),
    ) -> ScopedRuleRead:
        result = service.get_rule(rule_id)
        raise_for_failure(result)
        return ScopedRuleRead.from_entity(result.rule)

    @router.put("/{rule_id}", response_model=ScopedRuleRead)
    def update_rule(
        rule_id: UUID,
        payload: ScopedRuleUpdate,
        actor: Actor = Depends(get_actor),
        service: RuleLifecycleService = Depends(get_service),
    ) -> ScopedRuleRead:
        result = service.update_rule(
            payload.to_command(rule_id, user_id=actor.user_id, user_email=actor.email)
        )
        raise_for_failure(result)
        return ScopedRuleRead.from_entity(result.rule)

    @router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_rule(
        rule_id: UUID,
        reason: str | None = Query(default=None),
        actor: Actor = Depends(get_actor),
        service: RuleLifecycleService = Depends(get_service),
    ) -> Response:
        result = service.delete_rule(rule_id, actor.user_id, actor.email, reason=reason)
        raise_for_failure(result)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.get("/{rule_id}/history", response_model=RuleHistoryResponse)
    def read_rule_history(
        rule_id: UUID,
        service: RuleLifecycleService = Depends(get_service),
    ) -> RuleHistoryResponse:
        """Return the audit trail of a rule, including rules already deleted."""

        result = service.get_history(rule_id)
        raise_for_failure(result)
        current = result.current_rule
        return RuleHistoryResponse(
            rule_id=rule_id,
            rule_exists=result.rule_exists,
            current_rule=ScopedRuleRead.from_entity(current) if current else None,
            history=[RuleHistoryRead.from_entity(entry) for entry in result.history],
        )

    return router


commission_router = build_rule_router(COMMISSION_RULES, prefix="/commission-rules")
vat_router = build_rule_router(VAT_RULES, prefix="/vat-rules")


__all__ = ["build_rule_router", "commission_router", "vat_router"]
