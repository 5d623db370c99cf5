"""
模型公共方法
"""
from sqlalchemy import inspect

from ..extensions import db


class UpsertMixin:
    """按主键插入或更新一行（不提交事务）"""

    @classmethod
    def upsert(cls, keys, **values):
        """
        Args:
            keys: 主键字段 -> 值
            values: 其余字段 -> 新值

        Returns:
            (row, created)
        """
        pk = tuple(keys[col.name] for col in inspect(cls).primary_key)
        row = db.session.get(cls, pk if len(pk) > 1 else pk[0])
        created = row is None
        if created:
            row = cls(**keys)
            db.session.add(row)
        for name, value in values.items():
            setattr(row, name, value)
        if created:
            # 让同一事务内的后续查询能看到新行
            db.session.flush()
        return row, created
