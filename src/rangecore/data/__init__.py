from rangecore.data.mappers import instance_to_training_row, template_from_row
from rangecore.data.storage import Database
from rangecore.data.template_store import TemplateStore

__all__ = [
    "Database",
    "TemplateStore",
    "instance_to_training_row",
    "template_from_row",
]
