"""Base schema"""
from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """ORMオブジェクトから生成可能な共通スキーマ"""
    model_config = ConfigDict(from_attributes=True)
