# session_tracer/debugger/commands.py
"""
コマンドインタプリタ

ターミナルに入力された1行のテキストを、セッションの遷移を表すアクショントークンへ
変換します。テキストの解析と遷移の適用を分離し、遷移の語彙を閉じたまま保ちます。
"""
from enum import Enum
from typing import Dict, Iterable, Mapping, Optional


# @intent:responsibility セッションへ渡されるアクションの種類を定義します。
class ActionToken(Enum):
    STEP = "STEP"
    RESET = "RESET"
    UNRECOGNIZED = "UNRECOGNIZED"


DEFAULT_ALIASES: Mapping[ActionToken, Iterable[str]] = {
    ActionToken.STEP: ("n", "next", "s"),
    ActionToken.RESET: ("r", "reset"),
}


# @intent:responsibility 入力テキストをエイリアス表に従ってActionTokenへ変換します。
class CommandInterpreter:
    """
    前後の空白を除去し、大文字小文字を区別してエイリアス表と照合します。
    一致しないテキスト（空文字を含む）はUNRECOGNIZEDになります。
    """
    # @intent:pre-condition エイリアスは空でなく、前後に空白を含まず、重複していない必要があります。
    def __init__(self, aliases: Optional[Mapping[ActionToken, Iterable[str]]] = None):
        aliases = aliases if aliases is not None else DEFAULT_ALIASES
        self._table: Dict[str, ActionToken] = {}
        for token, names in aliases.items():
            if token is ActionToken.UNRECOGNIZED:
                raise ValueError("UNRECOGNIZED cannot have aliases.")
            for name in names:
                if not name or name != name.strip():
                    raise ValueError(f"Invalid command alias: {name!r}")
                if name in self._table:
                    raise ValueError(f"Duplicate command alias: {name!r}")
                self._table[name] = token

    def aliases_for(self, token: ActionToken) -> list:
        return [name for name, mapped in self._table.items() if mapped is token]

    # @intent:responsibility 生の入力テキストを解釈します。
    def interpret(self, raw_text: str) -> ActionToken:
        return self._table.get(raw_text.strip(), ActionToken.UNRECOGNIZED)
