"""
Reports Module

Store-level figures computed on demand:
- Dashboard (revenue today/total, expenses, net profit, low stock)
- Sales by period (year, month, invoice search)
- Cash register summaries with surplus/shortage totals and CSV export
"""
