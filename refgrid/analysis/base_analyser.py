"""Base analyzer class for all analysis components of the toolbox."""

from abc import ABC, abstractmethod
from typing import Any


class BaseAnalyser(ABC):
    """Abstract base class for analysis components.

    All analyzers must:
    1. Accept a DatasetView in their constructor
    2. Implement fit() to perform the computation and return self for chaining
    3. Implement result() to return a frozen dataclass with results

    Analyzers are pure computation: they never fit models, predict or plot.
    Callers combine ``result()`` objects with their own model and plotting code,
    e.g. ``model.predict(result.grid)``.

    ### Adding a New Analyzer

    ```python
    @dataclass(frozen=True)
    class MyResult:
        table: pd.DataFrame

    class MyAnalyzer(BaseAnalyser):
        def __init__(self, view: DatasetView):
            self._view = view
            self._fitted = False

        def fit(self) -> "MyAnalyzer":
            ...
            self._fitted = True
            return self

        def result(self) -> MyResult:
            if not self._fitted:
                raise ValueError("Must call fit() before result()")
            return MyResult(...)
    ```

    Then add a ``make_my_analyzer`` factory to ``BaseDataset`` building the view.
    """

    @abstractmethod
    def fit(self) -> "BaseAnalyser":
        """Run the computation.

        Returns:
            Self for method chaining.
        """
        ...

    @abstractmethod
    def result(self) -> Any:
        """Return results as a frozen dataclass instance.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        ...
