# finance/services/__init__.py
from .account_service import AccountService
from .balance_projector import BalanceProjector, project
from .category_service import CategoryService
from .dashboard_service import DashboardService
from .goal_service import GoalService
from .investment_service import InvestmentService
from .savings_box_service import SavingsBoxService
from .savings_transaction_service import SavingsTransactionService
from .transaction_service import TransactionService

__all__ = [
    "AccountService",
    "BalanceProjector",
    "CategoryService",
    "DashboardService",
    "GoalService",
    "InvestmentService",
    "SavingsBoxService",
    "SavingsTransactionService",
    "TransactionService",
    "project",
]
