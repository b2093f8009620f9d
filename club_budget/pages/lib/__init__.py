"""Page library modules for shared utilities and page-specific functions.

Structure:
    - common/: Shared utilities used across all pages
    - board/: Task board widgets used by the event planner page
"""

__all__ = ['common', 'board']
