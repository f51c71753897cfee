# Theme and component storage for TokenWeaver

from .repository import InMemoryRepository, JsonRepository, load_document, read_text

__all__ = ['InMemoryRepository', 'JsonRepository', 'load_document', 'read_text']
