"""Result history persistence."""

from kinemotion.storage.history import HistoryStore, result_from_dict, result_to_dict

__all__ = ["HistoryStore", "result_to_dict", "result_from_dict"]
