"""Sample financial chunks for local runs and tests."""

from __future__ import annotations

from datetime import date

from finance_rag.types import FinancialChunk


def _previous_month(year: int, month: int) -> tuple[int, int]:
    return (year - 1, 12) if month == 1 else (year, month - 1)


def sample_chunks(reference_date: date) -> list[FinancialChunk]:
    """Build demo chunks dated relative to `reference_date`.

    Covers last-month and current-month transactions, one older transaction
    for exercising date filters, insights and educational content.
    """

    year, month = reference_date.year, reference_date.month
    last_year, last_month = _previous_month(year, month)
    older_year, older_month = _previous_month(last_year, last_month)

    def this_month(day: int) -> str:
        return date(year, month, day).isoformat()

    def previous(day: int) -> str:
        return date(last_year, last_month, day).isoformat()

    return [
        FinancialChunk(
            id="tx-001",
            text="Grocery spending of $450.00 last month. Monthly purchase of food and cleaning supplies.",
            category="transactional",
            date=previous(5),
            source="bank-statement",
            amount=450.0,
        ),
        FinancialChunk(
            id="tx-002",
            text="Electricity bill payment: $180.50 last month. Average usage for a two-bedroom apartment.",
            category="transactional",
            date=previous(10),
            source="bank-statement",
            amount=180.5,
        ),
        FinancialChunk(
            id="tx-003",
            text="Salary received: $3,200.00 at the start of last month. Main monthly income.",
            category="transactional",
            date=previous(1),
            source="bank-statement",
            amount=3200.0,
        ),
        FinancialChunk(
            id="tx-004",
            text="Transport spending: $120.00 on bus fares during last month.",
            category="transactional",
            date=previous(15),
            source="bank-statement",
            amount=120.0,
        ),
        FinancialChunk(
            id="tx-005",
            text="Grocery spending: $380.00 this month, $70 less than the previous month.",
            category="transactional",
            date=this_month(3),
            source="bank-statement",
            amount=380.0,
        ),
        FinancialChunk(
            id="tx-006",
            text="Internet bill: $99.90 this month for a 100MB plan.",
            category="transactional",
            date=this_month(8) if reference_date.day >= 8 else this_month(1),
            source="bank-statement",
            amount=99.9,
        ),
        FinancialChunk(
            id="tx-007",
            text="Grocery spending: $520.00 two months ago, higher because of stock-up purchases.",
            category="transactional",
            date=date(older_year, older_month, 7).isoformat(),
            source="bank-statement",
            amount=520.0,
        ),
        FinancialChunk(
            id="insight-001",
            text=(
                "Financial analysis: last month you spent $750.50 on essential expenses "
                "(groceries, electricity, transport). That is 23% of your $3,200.00 income, "
                "inside the healthy 20-30% range for essentials."
            ),
            category="insight",
            date=previous(28),
            source="automatic-analysis",
        ),
        FinancialChunk(
            id="insight-002",
            text=(
                "Financial summary: your $3,200.00 income leaves roughly $2,000.00 per month "
                "after essential expenses, enough to pay down debt or start investing."
            ),
            category="insight",
            date=this_month(1),
            source="automatic-analysis",
        ),
        FinancialChunk(
            id="insight-003",
            text=(
                "Bottom line: you cut grocery spending by 15% this month compared with the "
                "previous one. Keep monitoring it to hold the trend."
            ),
            category="insight",
            date=this_month(1),
            source="automatic-analysis",
        ),
        FinancialChunk(
            id="edu-001",
            text=(
                "What is CDI? The CDI (Interbank Deposit Certificate) is the interest rate "
                "banks charge each other. It is the benchmark for fixed-income products such "
                "as CDBs and LCIs; products paying 100% of the CDI are considered safe and liquid."
            ),
            category="educational",
            date=this_month(1),
            source="investing-handbook",
        ),
        FinancialChunk(
            id="edu-002",
            text=(
                "Organizing personal finances: list all income and expenses, categorize "
                "spending as essential or discretionary, set a savings goal such as 20% of "
                "income, and follow the 50/30/20 rule for needs, wants and savings."
            ),
            category="educational",
            date=this_month(1),
            source="personal-finance-handbook",
        ),
        FinancialChunk(
            id="edu-003",
            text=(
                "Paying off debt: prioritize the highest interest rates such as credit cards, "
                "negotiate lower rates with creditors, and pick either the snowball method "
                "(smallest balance first) or the avalanche method (highest rate first)."
            ),
            category="educational",
            date=this_month(1),
            source="personal-finance-handbook",
        ),
        FinancialChunk(
            id="edu-004",
            text=(
                "Investing for beginners: start with low-risk options such as Treasury Selic "
                "bonds (daily liquidity) or CDBs from large banks. Avoid complex products until "
                "you understand them and diversify gradually as you learn about the market."
            ),
            category="educational",
            date=this_month(1),
            source="investing-handbook",
        ),
    ]
