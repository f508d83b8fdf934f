"""
workgraph — acyclic dependency graphs of project work items.

Vertices (spec, project, epic, user story, tasks) are joined by typed edges
(blocks, resources required for, contains). Every mutation is checked against
a fixed compatibility policy and rejected atomically when it would introduce a
cycle. Importing the package has no side effects: no config loading and no
logging setup.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
