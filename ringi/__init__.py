"""Ringi: a small approval workflow service for purchase and expense requests."""
