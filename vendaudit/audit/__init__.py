"""Audit — detect drift between vendored files and their upstream sources.

- reconcile: three-way set comparison used for file paths and hunks
- orchestrator: the audit flow, from manifest to ``AuditReport``
- report: report types and console presentation
"""
