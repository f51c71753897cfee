# Configuration for TokenWeaver

from .settings import ExportSettings, SettingsManager

__all__ = ['ExportSettings', 'SettingsManager']
