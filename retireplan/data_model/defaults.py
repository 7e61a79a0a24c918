from __future__ import annotations

from typing import List


def default_item_rows() -> List[dict[str, float | str | bool]]:
    return [
        {
            "Title": "Salary",
            "Category": "income",
            "Type": "labor",
            "Amount": 450.0,
            "Frequency": "monthly",
            "Start Month": "",
            "End Month": "",
            "Owner": "self",
            "Fixed To Retirement": True,
        },
        {
            "Title": "Living Expenses",
            "Category": "expense",
            "Type": "living",
            "Amount": 250.0,
            "Frequency": "monthly",
            "Start Month": "",
            "End Month": "",
            "Owner": "common",
        },
        {
            "Title": "Emergency Fund",
            "Category": "savings",
            "Type": "deposit",
            "Amount": 2000.0,
            "Frequency": "once",
            "Start Month": "",
            "End Month": "",
            "Owner": "self",
        },
        {
            "Title": "Index Fund",
            "Category": "savings",
            "Type": "fund",
            "Amount": 5000.0,
            "Frequency": "once",
            "Start Month": "",
            "End Month": "",
            "Owner": "self",
            "Monthly Contribution": 50.0,
        },
        {
            "Title": "Retirement Pension",
            "Category": "pension",
            "Type": "retirement",
            "Amount": 3000.0,
            "Frequency": "once",
            "Start Month": "",
            "End Month": "",
            "Owner": "self",
            "Payout Years": 20,
        },
        {
            "Title": "Apartment",
            "Category": "real_estate",
            "Type": "residence",
            "Amount": 60000.0,
            "Frequency": "once",
            "Start Month": "",
            "End Month": "",
            "Owner": "joint",
        },
        {
            "Title": "Mortgage",
            "Category": "debt",
            "Type": "mortgage",
            "Amount": 30000.0,
            "Frequency": "once",
            "Start Month": "",
            "End Month": "2050-12",
            "Owner": "joint",
            "Interest Rate (%)": 4.0,
            "Repayment Type": "level_payment",
        },
    ]
