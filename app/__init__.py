"""Marketplace notification service.

Kept as a regular package so ``app`` never resolves to an unrelated
namespace package installed alongside it.
"""
