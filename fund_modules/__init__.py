"""
Fund Modules.

Orchestration layers over the Fund Kernel. Each module contains:
- Domain models (the nouns)
- Pure transformation functions
- Configuration schemas (policy and settings)
- A service that wires collaborators together

Modules:
- Report: compiles categorized ledger transactions into the government
  income/expense report (収支報告書) XML document.
"""
