"""Tests for resource models."""

import pytest
from pydantic import ValidationError

from netstripe.schemas import (
    Card,
    Charge,
    Customer,
    InlineObject,
    Invoice,
    PaymentMethod,
    Plan,
    Product,
    RawId,
    Source,
    StripeList,
    Subscription,
    Token,
    TokenReference,
)


class TestCustomerAliases:
    """Tests for legacy field names on Customer."""

    def test_legacy_names_map_to_canonical_fields(self) -> None:
        customer = Customer(account_balance=100, default_card="card_1")
        assert customer.balance == 100
        assert customer.account_balance == 100
        assert customer.default_source == "card_1"
        assert customer.default_card == "card_1"

    def test_canonical_name_wins(self) -> None:
        customer = Customer.model_validate({"balance": 5, "account_balance": 7})
        assert customer.balance == 5

    def test_aliases_are_read_only(self) -> None:
        customer = Customer(balance=5)
        with pytest.raises((AttributeError, ValidationError)):
            customer.account_balance = 6  # type: ignore[misc]

    def test_cards_alias_for_sources(self) -> None:
        customer = Customer.model_validate(
            {
                "id": "cus_1",
                "cards": {
                    "object": "list",
                    "data": [{"object": "card", "id": "card_1"}],
                    "has_more": False,
                    "url": "/v1/customers/cus_1/cards",
                },
            }
        )
        assert isinstance(customer.sources, StripeList)
        assert customer.cards is customer.sources
        assert isinstance(customer.cards.first(), Card)

    def test_card_alias_for_source(self) -> None:
        customer = Customer(card="tok_visa")
        assert customer.source == TokenReference(id="tok_visa")


class TestCustomerSubscription:
    """Tests for the current subscription."""

    def test_first_of_subscriptions(self) -> None:
        customer = Customer(
            subscriptions=[
                {"object": "subscription", "id": "sub_1"},
                {"object": "subscription", "id": "sub_2"},
            ]
        )
        assert isinstance(customer.subscription, Subscription)
        assert customer.subscription.id == "sub_1"

    def test_no_subscriptions(self) -> None:
        assert Customer().subscription is None
        assert Customer(subscriptions=[]).subscription is None

    def test_subscriptions_array_becomes_list(self) -> None:
        customer = Customer(subscriptions=[{"id": "sub_1"}])
        assert isinstance(customer.subscriptions, StripeList)
        assert customer.subscriptions.count == 1


class TestReferences:
    """Tests for tagged reference fields."""

    def test_token_string(self) -> None:
        assert Charge(card="tok_123").card == TokenReference(id="tok_123")

    def test_card_id_string(self) -> None:
        assert Charge(card="card_123").card == RawId(id="card_123")

    def test_token_object(self) -> None:
        assert Charge(card=Token(id="tok_123")).card == TokenReference(id="tok_123")

    def test_token_object_without_id(self) -> None:
        with pytest.raises(ValidationError):
            Charge(card=Token())

    def test_tokens_only_where_allowed(self) -> None:
        assert Subscription(plan="tok_looks_like_token").plan == RawId(id="tok_looks_like_token")

    def test_existing_object(self) -> None:
        plan = Plan(id="gold")
        reference = Subscription(plan=plan).plan
        assert isinstance(reference, InlineObject)
        assert reference.resource == plan
        assert reference.is_new is False

    def test_raw_map_is_hydrated(self) -> None:
        reference = PaymentMethod(card={"number": "4242", "exp_month": 1}).card
        assert isinstance(reference, InlineObject)
        assert isinstance(reference.resource, Card)
        assert reference.resource.exp_month == 1
        assert reference.is_new is True

    def test_reference_serializes_to_id(self) -> None:
        assert Charge(card="tok_123").to_dict()["card"] == "tok_123"


class TestModels:
    """Tests for common model behavior."""

    def test_frozen(self) -> None:
        charge = Charge(amount=100)
        with pytest.raises(ValidationError):
            charge.amount = 200

    def test_to_dict_includes_discriminator(self) -> None:
        assert Charge(id="ch_1").to_dict() == {"object": "charge", "id": "ch_1"}

    def test_unknown_keys_are_not_attributes(self) -> None:
        card = Card.model_validate({"id": "card_1", "wallet": {"type": "apple_pay"}})
        assert card.unmodeled_fields == {"wallet": {"type": "apple_pay"}}
        with pytest.raises(AttributeError):
            card.wallet  # noqa: B018

    def test_unmodeled_fields_are_a_copy(self) -> None:
        card = Card.model_validate({"id": "card_1", "wallet": "x"})
        card.unmodeled_fields["wallet"] = "y"
        assert card.unmodeled_fields == {"wallet": "x"}

    def test_wire_booleans(self, boxed) -> None:
        assert Product(active="true").active is True
        assert Product(active=0).active is False
        assert Product(active=boxed(False)).active is False

    def test_invalid_boolean(self) -> None:
        with pytest.raises(ValidationError):
            Product(active="maybe")

    def test_clearable_metadata_accepts_empty_string(self) -> None:
        assert Source(metadata="").metadata == ""

    def test_plain_metadata_rejects_empty_string(self) -> None:
        with pytest.raises(ValidationError):
            Charge(metadata="")

    def test_trial_end_now(self) -> None:
        assert Subscription(trial_end="now").trial_end == "now"


class TestInvoiceLines:
    """Tests for Invoice line helpers."""

    def test_lines_split_by_type(self) -> None:
        invoice = Invoice(
            lines={
                "object": "list",
                "url": "/v1/invoices/in_1/lines",
                "data": [
                    {"object": "line_item", "id": "li_1", "type": "invoiceitem"},
                    {"object": "line_item", "id": "li_2", "type": "subscription"},
                ],
            }
        )
        assert [line.id for line in invoice.invoiceitems] == ["li_1"]
        assert [line.id for line in invoice.subscriptions] == ["li_2"]

    def test_no_lines(self) -> None:
        assert Invoice().invoiceitems == []
