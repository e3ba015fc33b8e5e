from core.selection.service import SelectionService, SelectionResult

__all__ = ['SelectionService', 'SelectionResult']
