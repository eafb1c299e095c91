from mdcontext.builders.tex import TexBuilder
from mdcontext.builders.pdf import PdfBuilder

BUILDERS = {
    "tex": TexBuilder,
    "pdf": PdfBuilder,
}

# Built unless more is asked for (PDF needs a ConTeXt install, opt-in with --pdf)
DEFAULT_FORMATS = ["tex"]
