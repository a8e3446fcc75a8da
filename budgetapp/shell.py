"""Interactive console shell for the budget manager.

Run ``budgetapp`` (or ``python -m budgetapp.shell``) and pick options from the
numbered menu. Input and output are injectable so the loop can be scripted.
"""

import argparse
import logging
from typing import Callable, Dict, List, Optional

from budgetapp import config
from budgetapp.domain import TEMPLATE_CATEGORIES, BudgetCategory, Expense, Income
from budgetapp.errors import LimitExceededError, ValidationError
from budgetapp.events import EventBus, register_default_handlers
from budgetapp.parsing import parse_amount, parse_choice, parse_date, parse_datetime, parse_payment_method
from budgetapp.services import BudgetManager
from budgetapp.transforms import net_balance, total_expenses, total_income

logger = logging.getLogger(__name__)

MENU = (
    "1. Add Income",
    "2. Add Expense",
    "3. Add Budget Category",
    "4. Delete Budget Category",
    "5. View Expenses by Category",
    "6. View Expenses Above Amount",
    "7. View Transactions by Date Range",
    "8. Reset Category Expenditure",
    "9. View Budget Summary",
    "10. Exit",
)
EXIT_CHOICE = len(MENU)

DATETIME_PROMPT = "Enter date and time (yyyy-MM-dd HH:mm, e.g., 2025-03-03 12:12): "


class BudgetShell:

    def __init__(
        self,
        manager: BudgetManager,
        input_func: Optional[Callable[[str], str]] = None,
        output: Optional[Callable[[str], None]] = None,
    ):
        self.manager = manager
        self.input_func = input_func or input
        self.output = output or print
        self.actions: Dict[int, Callable[[], None]] = {
            1: self.add_income,
            2: self.add_expense,
            3: self.add_category,
            4: self.delete_category,
            5: self.view_expenses_by_category,
            6: self.view_expenses_above_amount,
            7: self.view_transactions_by_date_range,
            8: self.reset_expenditure,
            9: self.view_summary,
        }

    def prompt(self, text: str) -> str:
        return self.input_func(text)

    def run(self) -> None:
        while True:
            self.output("\n==== Budget Management Menu ====")
            for line in MENU:
                self.output(line)
            try:
                choice = parse_choice(self.prompt("Enter your choice: "))
                if choice == EXIT_CHOICE:
                    self.output("Exiting Budget Manager. Goodbye!")
                    return
                action = self.actions.get(choice)
                if action is None:
                    self.output("Invalid option. Try again.")
                    continue
                action()
            except (ValidationError, LimitExceededError) as e:
                logger.debug("Menu action failed: %s", e)
                self.output(f"Error: {e}")
            except EOFError:
                self.output("\nExiting Budget Manager. Goodbye!")
                return

    # ── Menu actions ────────────────────────────────────────────────────────

    def add_income(self) -> None:
        amount = parse_amount(self.prompt("Enter income amount (e.g., 1000.00): "))
        source = self.prompt("Enter source (e.g., Salary): ")
        when = parse_datetime(self.prompt(DATETIME_PROMPT))
        self.manager.add_income(Income(amount, when, source))
        self.output("Income added!")

    def add_expense(self) -> None:
        category = self.select_category(allow_create=True)
        if category is None:
            return
        amount = parse_amount(self.prompt("Enter expense amount (e.g., 50.00): "))
        method = parse_payment_method(self.prompt("Enter payment method (CASH, CARD, ALIPAY, WECHAT): "))
        when = parse_datetime(self.prompt(DATETIME_PROMPT))
        results = self.manager.add_expense(Expense(amount, when, category.name, method), category)
        self.output("Expense added!")
        for result in results:
            if result.get("alert"):
                self.output(f"Warning: {result['alert']}")

    def add_category(self) -> None:
        self.manager.add_category(self._read_new_category("Enter category name for expenses"))
        self.output("Category added!")

    def delete_category(self) -> None:
        category = self.select_category(allow_create=False)
        if category is not None:
            self.manager.delete_category(category)
            self.output("Category deleted!")

    def view_expenses_by_category(self) -> None:
        category = self.select_category(allow_create=False)
        if category is not None:
            self.output(f"\nExpenses for {category.name}:")
            self._print_all(self.manager.get_expenses_by_category(category))

    def view_expenses_above_amount(self) -> None:
        threshold = parse_amount(self.prompt("Enter minimum expense amount (e.g., 100.00): "))
        self.output(f"\nExpenses above {config.format_money(threshold)}:")
        self._print_all(self.manager.get_expenses_above_amount(threshold))

    def view_transactions_by_date_range(self) -> None:
        start = parse_date(self.prompt("Enter start date (yyyy-MM-dd): "))
        end = parse_date(self.prompt("Enter end date (yyyy-MM-dd): "))
        self.output(f"\nTransactions from {start.isoformat()} to {end.isoformat()}:")
        self._print_all(self.manager.get_transactions_by_date_range(start, end))

    def reset_expenditure(self) -> None:
        category = self.select_category(allow_create=False)
        if category is not None:
            self.manager.reset_expenditure(category)
            self.output("Category expenditure reset!")

    def view_summary(self) -> None:
        categories = self._sorted_categories()
        if not categories:
            self.output("No categories available.")
        for c in categories:
            flag = " (OVER LIMIT)" if c.is_over_limit else ""
            self.output(f"{c}, Remaining: {config.format_money(c.remaining)}{flag}")
        everything = self.manager.get_all_transactions()
        self.output(f"Total income: {config.format_money(total_income(everything))}")
        self.output(f"Total expenses: {config.format_money(total_expenses(everything))}")
        self.output(f"Net balance: {config.format_money(net_balance(everything))}")

    # ── Category selection ──────────────────────────────────────────────────

    def select_category(self, allow_create: bool) -> Optional[BudgetCategory]:
        """Let the user pick a registered category, or create one.

        With no categories registered, creation offers the template list plus
        a custom entry. Returns None when nothing was picked.
        """
        categories = self._sorted_categories()

        if not categories:
            if not allow_create:
                self.output("No categories available.")
                return None
            self.output("No categories exist. Choose a template category or create a custom one:")
            for i, template in enumerate(TEMPLATE_CATEGORIES, start=1):
                self.output(f"{i}. {template.name} (Limit: {config.format_money(template.limit)})")
            custom_choice = len(TEMPLATE_CATEGORIES) + 1
            self.output(f"{custom_choice}. Create custom category")
            choice = parse_choice(self.prompt("Enter choice: "))
            if choice == custom_choice:
                category = self._read_new_category("Enter custom category name for expenses")
            elif 1 <= choice <= len(TEMPLATE_CATEGORIES):
                category = TEMPLATE_CATEGORIES[choice - 1].build()
            else:
                self.output("Invalid choice.")
                return None
            self.manager.add_category(category)
            return category

        self.output("Available categories:")
        for i, c in enumerate(categories, start=1):
            self.output(
                f"{i}. {c.name} (Limit: {config.format_money(c.limit)}, "
                f"Spent: {config.format_money(c.spent_so_far)})"
            )
        create_choice = len(categories) + 1
        if allow_create:
            self.output(f"{create_choice}. Create new category")
        choice = parse_choice(self.prompt("Enter choice: "))
        if allow_create and choice == create_choice:
            category = self._read_new_category("Enter new category name for expenses")
            self.manager.add_category(category)
            return category
        if 1 <= choice <= len(categories):
            return categories[choice - 1]
        self.output("Invalid choice.")
        return None

    def _read_new_category(self, name_prompt: str) -> BudgetCategory:
        name = self.prompt(f"{name_prompt} (e.g., Food, Rent, Transport): ")
        if self.manager.find_category(name) is not None:
            raise ValidationError(f"Category {name.strip()} already exists")
        limit = parse_amount(self.prompt("Enter monthly limit (e.g., 500.00): "))
        return BudgetCategory(name, limit)

    def _sorted_categories(self) -> List[BudgetCategory]:
        return sorted(self.manager.get_categories(), key=lambda c: c.name.casefold())

    def _print_all(self, items) -> None:
        if not items:
            self.output("(none)")
        for item in items:
            self.output(str(item))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Track incomes and expenses against monthly category budgets.")
    parser.add_argument(
        "--log-level",
        default=config.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Logging level (default from BUDGETAPP_LOG_LEVEL)",
    )
    parser.add_argument(
        "--currency",
        default=config.CURRENCY_SYMBOL,
        help="Currency symbol used when printing amounts",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config.configure_logging(args.log_level)
    config.CURRENCY_SYMBOL = args.currency

    manager = BudgetManager(bus=register_default_handlers(EventBus()))
    BudgetShell(manager).run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
