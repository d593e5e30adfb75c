from PySide6.QtGui import QColor, QFont, QTextCharFormat

from syntax.patterns import TokenClass


class SyntaxStyleDark:
    TextEditBackground = QColor("#282C34")
    DefaultText = QColor("#ABB2BF")

    Default = {"foreground": DefaultText}
    At = {"foreground": QColor("#E06C75"), "font_weight": QFont.Bold}
    Preproc = {"foreground": QColor("#D19A66")}
    Type = {"foreground": QColor("#61AFEF"), "font_weight": QFont.Bold}
    Keyword = {"foreground": QColor("#C678DD"), "font_weight": QFont.Bold}
    Paren = {"foreground": QColor("#E5C07B")}
    Brace = {"foreground": QColor("#E5C07B")}
    Bracket = {"foreground": QColor("#E5C07B")}
    Semicolon = {"foreground": QColor("#56B6C2")}
    String = {"foreground": QColor("#98C379")}
    Comment = {"foreground": QColor("#5C6370"), "italic": True}

    @staticmethod
    def get_format(style_dict):
        fmt = QTextCharFormat()
        if "foreground" in style_dict:
            fmt.setForeground(style_dict["foreground"])
        if "background" in style_dict:
            fmt.setBackground(style_dict["background"])
        if style_dict.get("font_weight") == QFont.Bold:
            fmt.setFontWeight(QFont.Bold)
        if style_dict.get("italic"):
            fmt.setFontItalic(True)
        if style_dict.get("underline"):
            fmt.setFontUnderline(True)
        return fmt


_STYLE_BY_CLASS = {
    TokenClass.AT:        SyntaxStyleDark.At,
    TokenClass.PREPROC:   SyntaxStyleDark.Preproc,
    TokenClass.TYPE:      SyntaxStyleDark.Type,
    TokenClass.KEYWORD:   SyntaxStyleDark.Keyword,
    TokenClass.PAREN:     SyntaxStyleDark.Paren,
    TokenClass.BRACE:     SyntaxStyleDark.Brace,
    TokenClass.BRACKET:   SyntaxStyleDark.Bracket,
    TokenClass.SEMICOLON: SyntaxStyleDark.Semicolon,
    TokenClass.STRING:    SyntaxStyleDark.String,
    TokenClass.COMMENT:   SyntaxStyleDark.Comment,
}


def build_token_formats() -> dict:
    """TokenClass -> QTextCharFormat для тёмной темы."""
    return {cls: SyntaxStyleDark.get_format(style) for cls, style in _STYLE_BY_CLASS.items()}
