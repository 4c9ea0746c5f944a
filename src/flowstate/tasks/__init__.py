"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Project, Label, Priority, TaskFilters)
- task_store.py: in-memory store with snapshot persistence + next-task selection
- grouping.py: filtering and due-date buckets for list views
- task_api.py: flows that span the task store and the progression engine
"""
