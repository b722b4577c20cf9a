"""Routing — explicit route table first, naming convention second."""
