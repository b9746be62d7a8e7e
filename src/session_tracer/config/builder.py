import random

from session_tracer.core import stream
from session_tracer.core.memory import MemoryImage
from session_tracer.core.registers import RegisterBank
from session_tracer.debugger.mutation import create_policy
from session_tracer.debugger.scheduler import HighlightScheduler
from session_tracer.debugger.session import SessionController
from .models import SessionConfig

# @intent:responsibility セッション構成（Config）に基づいて、命令列・メモリ・レジスタ・コントローラを生成し接続します。
class SessionBuilder:
    def build(self, config: SessionConfig, scheduler: HighlightScheduler) -> SessionController:
        """
        構成からSessionControllerを組み立てます。
        ハイライト解除に使うschedulerは呼び出し側が所有します（GUIではQtのスケジューラ、テストではManualScheduler）。
        """
        # 全ての乱数は1つのシード付きRandomから取り出し、シード指定時の再現性を保つ
        rng = random.Random(config.session.seed)

        program = config.program
        instructions = stream.generate(
            base_address=program.base_address,
            count=program.instruction_count,
            rng=rng,
            instruction_width=program.instruction_width,
            annotation_probability=program.annotation_probability,
        )

        memory = MemoryImage.generate(config.memory.length, rng=rng, base_address=config.memory.base_address)

        registers = RegisterBank.seeded(rng, sp=config.registers.sp, overrides=config.registers.initial)

        return SessionController(
            instructions=instructions,
            registers=registers,
            memory=memory,
            scheduler=scheduler,
            initial_index=config.session.initial_index,
            rng=rng,
            policy=create_policy(config.session.mutation_policy),
            history_limit=config.session.history_limit,
            highlight_delay=config.session.highlight_delay_ms / 1000.0,
        )
