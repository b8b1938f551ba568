from .model import BaseModel, ModelType
