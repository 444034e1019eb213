from kubectl_injection_check.context import AnalysisContext


class Analyzer:
    """
    Base class for all snapshot analyzers.
    """

    # ---- Metadata (mandatory) ----
    name: str = "BaseAnalyzer"
    description: str = ""

    # ---- Contract requirements ----
    # Resource kinds the analyzer reads. Declared for registration only.
    inputs: list[str] = []

    def analyze(self, ctx: AnalysisContext) -> None:
        """
        Walk the snapshot through ctx.resources() and report findings with
        ctx.report(). Must not mutate the snapshot.
        """
        raise NotImplementedError
