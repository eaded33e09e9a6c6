"""Scenarios that drive the ledger with generated data."""

from emi_ledger.scenarios.loan_portfolio import LoanPortfolioScenario

__all__ = ["LoanPortfolioScenario"]
