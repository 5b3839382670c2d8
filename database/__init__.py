from .store import RecordStore, Update

__all__ = ['RecordStore', 'Update']
