"""
Parameter sources - Deliver named-bin bundles of calibration coefficients.

Local ROOT files and the CCDB differ in how the object is located, but
both expose the same capability: ``fetch(key) -> NamedBinBundle``.
Every failure is reported as ParameterSourceError.
"""

from abc import ABC, abstractmethod
import logging

import uproot

from tpcpid.domain.parameters import NamedBinBundle
from tpcpid.domain.exceptions import ParameterSourceError
from tpcpid.services.ccdb.client import CcdbClient


def _label_bins(labels, values) -> dict[str, float]:
    """
    Bin label -> content.

    ROOT keeps the bin number of each label in the label's unique ID; labels
    written without it (all IDs 0) are taken in bin order.
    """
    bin_numbers = [int(label.member("@fUniqueID")) for label in labels]
    if not any(bin_numbers):
        bin_numbers = list(range(1, len(labels) + 1))

    bins = {}
    for label, number in zip(labels, bin_numbers):
        if not 1 <= number <= len(values):
            raise ParameterSourceError(f"Label '{label}' refers to bin {number} outside the axis")
        bins[str(label)] = float(values[number - 1])
    return bins


def bundle_from_histogram(hist, name: str) -> NamedBinBundle:
    """
    Convert a labelled TH1 into a NamedBinBundle.

    Raises:
        ParameterSourceError: If the histogram has no bin labels
    """
    try:
        axis = hist.member("fXaxis")
        labels = axis.member("fLabels", none_if_missing=True)
        values = hist.values()
        declared_size = int(axis.member("fNbins"))
    except Exception as e:
        raise ParameterSourceError(f"Object {name} is not a labelled histogram: {e}") from e

    if not labels:
        raise ParameterSourceError(f"Histogram {name} has no bin labels")

    return NamedBinBundle(name=name, bins=_label_bins(labels, values), declared_size=declared_size)


class ParameterSource(ABC):
    """Key-addressed provider of named-bin bundles."""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def fetch(self, key: str) -> NamedBinBundle:
        """
        Fetch the bundle addressed by key.

        Raises:
            ParameterSourceError: If the object cannot be delivered
        """
        pass


class RootFileSource(ParameterSource):
    """Reads the ``hpar`` histogram from a local (or xrootd) ROOT file."""

    HISTOGRAM_NAME = "hpar"

    def fetch(self, key: str) -> NamedBinBundle:
        self.logger.info(f"Setting parameters from file {key}")
        try:
            with uproot.open(key) as f:
                if self.HISTOGRAM_NAME not in f:
                    raise ParameterSourceError(
                        f"The input file does not contain the histogram {self.HISTOGRAM_NAME}"
                    )
                hist = f[self.HISTOGRAM_NAME]
                return bundle_from_histogram(hist, self.HISTOGRAM_NAME)
        except ParameterSourceError:
            raise
        except Exception as e:
            raise ParameterSourceError(f"Could not open parameter file {key}: {e}") from e


class CcdbSource(ParameterSource):
    """Reads a labelled histogram stored in the CCDB."""

    def __init__(self, client: CcdbClient):
        super().__init__()
        self.client = client

    def fetch(self, key: str) -> NamedBinBundle:
        self.logger.info(f"Setting parameters from CCDB object {key}")
        hist = self.client.get_object(key)
        return bundle_from_histogram(hist, key)
