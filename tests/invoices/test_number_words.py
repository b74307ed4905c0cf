from decimal import Decimal

import pytest

from src.staffing_billing.staffing_billing.invoices.words import number_to_words


@pytest.mark.parametrize(
    "amount, words",
    [
        (0, "ZERO RUPEES ONLY"),
        (7, "SEVEN RUPEES ONLY"),
        (15, "FIFTEEN RUPEES ONLY"),
        (105, "ONE HUNDRED FIVE RUPEES ONLY"),
        (25500, "TWENTY FIVE THOUSAND FIVE HUNDRED RUPEES ONLY"),
        (118000, "ONE LAKH EIGHTEEN THOUSAND RUPEES ONLY"),
        (123456789, "TWELVE CRORE THIRTY FOUR LAKH FIFTY SIX THOUSAND SEVEN HUNDRED EIGHTY NINE RUPEES ONLY"),
        (1000000000, "ONE HUNDRED CRORE RUPEES ONLY"),
    ],
)
def test_indian_grouping(amount, words):
    assert number_to_words(amount) == words


def test_fractions_round_half_up():
    assert number_to_words(Decimal("99.5")) == "ONE HUNDRED RUPEES ONLY"


def test_negative_amounts_are_rejected():
    with pytest.raises(ValueError):
        number_to_words(-1)
