"""Finance achievements: capital structure, cash and shareholder returns."""

from ..types import Category, Metric as M, Tier
from .builders import above, at_least, at_most, below, best, define, equals, flag, worst


def _a(id, name, description, tier, *requirements, **options):
    return define(Category.FINANCE, id, name, description, tier, *requirements, **options)


FINANCE_ACHIEVEMENTS = [
    _a("debut_debt", "Debut Debt", "Take out your first loan.",
       Tier.BRONZE, above(M.LOAN_TAKEN, 0)),
    _a("ipo_day", "IPO Day", "Raise equity by issuing new shares.",
       Tier.BRONZE, above(M.EQUITY_RAISED, 0)),
    _a("dividend_darling", "Dividend Darling", "Pay a dividend.",
       Tier.BRONZE, above(M.DIVIDENDS_PAID, 0)),
    _a("cash_cushion", "Cash Cushion", "Hold $250M in cash.",
       Tier.SILVER, at_least(M.CASH, 250_000_000)),
    _a("buyback_baron", "Buyback Baron", "Buy back 500,000 shares in one round.",
       Tier.SILVER, at_least(M.SHARES_BOUGHT_BACK, 500_000)),
    _a("debt_destroyer", "Debt Destroyer", "Repay all outstanding debt after borrowing.",
       Tier.SILVER, at_least(M.TOTAL_LOANS, 1), equals(M.DEBT, 0), above(M.DEBT_REPAID, 0)),
    _a("revenue_rocket", "Revenue Rocket", "Earn $150M revenue in a single round.",
       Tier.SILVER, at_least(M.REVENUE, 150_000_000)),
    _a("empire_builder", "Empire Builder", "Reach $1B cumulative revenue.",
       Tier.GOLD, at_least(M.CUMULATIVE_REVENUE, 1_000_000_000)),
    _a("fort_knox", "Fort Knox", "Hold $500M in cash.",
       Tier.GOLD, at_least(M.CASH, 500_000_000), title="Keeper of the Vault"),
    _a("buffetts_apprentice", "Warren Buffett's Apprentice", "Post the best EPS of all teams.",
       Tier.GOLD, best(M.EPS)),
    _a("shareholder_darling", "Shareholder Darling", "Pay $20M in total dividends.",
       Tier.GOLD, at_least(M.TOTAL_DIVIDENDS, 20_000_000)),
    _a("financial_architect", "Financial Architect", "Borrow, issue equity and buy back shares over the game.",
       Tier.GOLD, at_least(M.TOTAL_LOANS, 1), at_least(M.TOTAL_STOCK_ISSUES, 1), at_least(M.TOTAL_BUYBACKS, 1)),
    _a("billion_dollar_company", "Corporate Mastermind", "Reach a $1B market capitalisation.",
       Tier.PLATINUM, at_least(M.MARKET_CAP, 1_000_000_000), title="Mastermind"),
    _a("capital_allocator", "Capital Allocator", "Keep EPS above $2 for three rounds.",
       Tier.PLATINUM, above(M.EPS, 2, sustained=3)),
    _a("drowning_in_debt", "Drowning in Debt", "Carry more debt than two rounds of revenue.",
       Tier.INFAMY, above(M.DEBT_TO_REVENUE, 2), above(M.DEBT, 0)),
    _a("junk_bond_status", "Junk Bond Status", "Carry $300M of debt.",
       Tier.INFAMY, at_least(M.DEBT, 300_000_000)),
    _a("cash_hemorrhage", "Cash Hemorrhage", "Burn $75M of cash in one round.",
       Tier.INFAMY, at_most(M.CASH_DELTA, -75_000_000)),
    _a("ponzi_vibes", "Ponzi Vibes", "Pay a dividend while losing money.",
       Tier.INFAMY, above(M.DIVIDENDS_PAID, 0), below(M.NET_INCOME, 0)),
    _a("interest_rate_victim", "Interest Rate Victim", "Pay $5M of interest in a single round.",
       Tier.INFAMY, at_least(M.INTEREST_PAID, 5_000_000)),
    _a("dividend_of_doom", "Dividend of Doom", "Pay a dividend that pushes cash negative.",
       Tier.INFAMY, above(M.DIVIDENDS_PAID, 0), below(M.CASH, 0)),
    _a("the_board_revolt", "The Board Revolt", "Post the worst EPS of all teams.",
       Tier.INFAMY, worst(M.EPS)),
    _a("overdrawn", "Overdrawn", "End two rounds in a row with negative cash.",
       Tier.INFAMY, at_least(M.CONSECUTIVE_NEGATIVE_CASH, 2), flag(M.IN_RECESSION, invert=True)),
]
