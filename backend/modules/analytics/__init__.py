# backend/modules/analytics/__init__.py

"""
Analytics Module - Dashboard summary and chart series

Aggregates the full order set into scalar counters (orders, earnings,
completed, pending, canceled) and a per-day earnings/orders series over
a trailing window.
"""
