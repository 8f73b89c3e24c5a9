"""
Persistence module for the crawler: save export and import.
"""

from .save_codec import SaveData, create_save_data, decode_save, encode_save

__all__ = ["SaveData", "create_save_data", "decode_save", "encode_save"]
