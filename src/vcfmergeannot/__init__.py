"""vcfmergeannot: streaming annotation of sorted VCF/BCF files.

Most users should use the CLI:

    vcfmergeannot primary.list dbsnp.vcf.gz out.vcf.gz --info RS --copy-id

"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
