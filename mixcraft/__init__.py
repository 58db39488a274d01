"""
Challenge grading and adaptive curriculum engine for sound design and mixing lessons.
"""
__version__ = "0.1.0"
