"""
Task subsystem.

Components:
- models.py: data structures (Task, Comment, TaskDetail, Denied)
- task_store.py / comment_store.py: typed adapters over the document store
- dashboard.py: live view of one owner's tasks + create/delete intents
- detail.py: one-shot resolution of a public task and its comments
- comments.py: comment thread with optimistic local appends
- share.py: share links for public tasks
"""
