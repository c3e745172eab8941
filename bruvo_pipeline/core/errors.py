# bruvo_pipeline/core/errors.py


class BruvoError(ValueError):
    """Base class for failures of a single genotype comparison."""


class InvalidPloidyError(BruvoError):
    pass


class InvalidGenotypeError(BruvoError):
    pass


class MissingAlleleError(BruvoError):
    pass


class ReductionUnderflowError(BruvoError):
    pass


class MalformedPermutationTableError(BruvoError):
    pass
