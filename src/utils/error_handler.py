"""エラーハンドリング用デコレータ

data.json の読み書きのように、失敗をログに残してデフォルト値で続行するか、
ログに残して呼び出し元へ送り返すかを宣言的に選ぶためのもの。
"""

import functools
import inspect
from collections.abc import Callable
from typing import Any

import structlog

logger = structlog.get_logger()


def _log_failure(operation_name: str, exc: Exception, **context: Any) -> None:
    logger.error(
        f"Failed to {operation_name}",
        error=str(exc),
        error_type=type(exc).__name__,
        **context,
    )


def handle_errors(
    operation_name: str,
    default_return: Any = None,
    reraise: bool = False,
    **log_kwargs: Any,
) -> Callable[[Callable], Callable]:
    """
    Wrap a sync or async callable so that failures are logged.

    Args:
        operation_name: ログに出す操作名 ("read plugin data" など)
        default_return: 例外時に返す値
        reraise: True なら記録後に同じ例外を送出する
        **log_kwargs: ログに追加するコンテキスト
    """

    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    _log_failure(operation_name, e, **log_kwargs)
                    if reraise:
                        raise
                    return default_return

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                _log_failure(operation_name, e, **log_kwargs)
                if reraise:
                    raise
                return default_return

        return wrapper

    return decorator


def safe_with_default(operation_name: str, default_value: Any, **log_kwargs: Any):
    """失敗時は default_value を返す"""
    return handle_errors(operation_name, default_return=default_value, **log_kwargs)


def critical_operation(operation_name: str, **log_kwargs: Any):
    """失敗時はログに残して再送出する"""
    return handle_errors(operation_name, reraise=True, **log_kwargs)
