from __future__ import annotations

from decimal import Decimal

import pytest
from budget_db.models.ledger import HbBudget, HbHousehold
from budget_ledger import (
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
    catalog,
    current_balance,
)
from budget_ledger.authz import SqlMembershipChecker

from tests.helpers.db import World, count_rows


def test_household_owner_is_a_member(session) -> None:
    household_id = catalog.create_household(session, name="  The   Flat ", owner_id="ann")
    session.commit()

    assert session.get(HbHousehold, household_id).name == "The Flat"
    assert SqlMembershipChecker(session).is_member("ann", household_id)
    assert not SqlMembershipChecker(session).is_member("someone", household_id)


def test_add_member_is_idempotent_and_member_only(session, world: World) -> None:
    catalog.add_member(session, household_id=world.household_id, user_id="bob", actor_id="alice")
    with pytest.raises(ForbiddenError):
        catalog.add_member(
            session, household_id=world.household_id, user_id="eve", actor_id=world.outsider
        )
    with pytest.raises(NotFoundError):
        catalog.add_member(session, household_id="missing", user_id="eve", actor_id="alice")


@pytest.mark.parametrize("name", ["", "   ", "x" * 101])
def test_names_are_validated(session, world: World, name: str) -> None:
    with pytest.raises(InvalidArgumentError) as ei:
        catalog.create_account(
            session, household_id=world.household_id, name=name, actor_id=world.owner
        )
    assert ei.value.field == "name"


def test_negative_opening_balance_is_allowed(session, world: World) -> None:
    card = catalog.create_account(
        session,
        household_id=world.household_id,
        name="Credit card",
        actor_id=world.owner,
        initial_balance="-250.5",
    )
    session.commit()

    assert card["initial_balance"] == "-250.50"
    assert current_balance(session, account_id=card["id"]) == Decimal("-250.50")


def test_category_types_are_parsed(session, world: World) -> None:
    cat = catalog.create_category(
        session,
        household_id=world.household_id,
        name="Side gig",
        types=["expense", "income"],
        actor_id=world.owner,
    )
    assert cat["types"] == ["EXPENSE", "INCOME"]

    for bad in ([], ["TRANSFER"]):
        with pytest.raises(InvalidArgumentError) as ei:
            catalog.create_category(
                session,
                household_id=world.household_id,
                name="Bad",
                types=bad,
                actor_id=world.owner,
            )
        assert ei.value.field == "types"


def test_budget_with_foreign_account_is_not_created(session, world: World, db_url: str) -> None:
    before = count_rows(db_url, HbBudget)
    with pytest.raises(NotFoundError):
        catalog.create_budget(
            session,
            household_id=world.household_id,
            name="Mixed",
            actor_id=world.owner,
            account_ids=[world.checking, world.foreign_account],
        )
    assert count_rows(db_url, HbBudget) == before


def test_rename_and_archive(session, world: World) -> None:
    acct = catalog.rename_account(
        session, account_id=world.savings, name="Rainy day", actor_id=world.member
    )
    assert acct["name"] == "Rainy day"

    archived = catalog.archive_account(session, account_id=world.savings, actor_id=world.owner)
    assert archived["archived"] is True

    budget = catalog.rename_budget(
        session, budget_id=world.budget_a, name="Household", actor_id=world.owner
    )
    assert budget["name"] == "Household"
    assert budget["account_ids"] == sorted([world.checking, world.savings])

    with pytest.raises(ForbiddenError):
        catalog.rename_budget(
            session, budget_id=world.budget_a, name="Mine", actor_id=world.outsider
        )
