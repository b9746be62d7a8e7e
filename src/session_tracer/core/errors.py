# session_tracer/core/errors.py
"""
セッションエンジンの例外定義。
"""


# @intent:responsibility セッションエンジンが送出する全ての例外の基底クラス。
class SessionError(Exception):
    pass


# @intent:responsibility 固定の識別子集合に含まれないレジスタへのアクセスを通知します。
# @intent:rationale 辞書アクセスと同じ扱いで捕捉できるよう KeyError も継承します。
class UnknownRegister(SessionError, KeyError):
    """
    RegisterBankの固定識別子集合に存在しないレジスタが指定された場合に送出されます。
    プログラミングエラーであり、エントリが暗黙に作成されることはありません。
    """
    def __init__(self, register_id: str):
        super().__init__(register_id)
        self.register_id = register_id

    def __str__(self) -> str:
        return f"Unknown register: {self.register_id!r}"


# @intent:responsibility 最終命令を越えるステップ要求を通知します。
class EndOfProgram(SessionError):
    """
    最終命令の位置でStepが要求された場合に送出されます。
    SessionControllerが内部で捕捉し、履歴へ記録してHALTED状態へ遷移します。
    """
    def __init__(self, pc_index: int, instruction_count: int):
        super().__init__(f"End of program at index {pc_index} of {instruction_count}")
        self.pc_index = pc_index
        self.instruction_count = instruction_count
