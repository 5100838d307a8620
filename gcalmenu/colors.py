class CLR:
    use_color = True

    def __str__(self):
        return self.color if self.use_color else ''


class CLR_NRM(CLR):
    color = "\033[0m"


class CLR_RED(CLR):
    color = "\033[0;31m"


class CLR_BRRED(CLR):
    color = "\033[31;1m"


class CLR_GRN(CLR):
    color = "\033[0;32m"


class CLR_BRGRN(CLR):
    color = "\033[32;1m"


class CLR_YLW(CLR):
    color = "\033[0;33m"


class CLR_BRYLW(CLR):
    color = "\033[33;1m"


class CLR_BLU(CLR):
    color = "\033[0;34m"


class CLR_MAG(CLR):
    color = "\033[0;35m"


class CLR_BRMAG(CLR):
    color = "\033[35;1m"


class CLR_CYN(CLR):
    color = "\033[0;36m"


class CLR_WHT(CLR):
    color = "\033[0;37m"


COLOR_NAMES = {
    'default': CLR_NRM,
    'red': CLR_RED,
    'brightred': CLR_BRRED,
    'green': CLR_GRN,
    'brightgreen': CLR_BRGRN,
    'yellow': CLR_YLW,
    'brightyellow': CLR_BRYLW,
    'blue': CLR_BLU,
    'magenta': CLR_MAG,
    'brightmagenta': CLR_BRMAG,
    'cyan': CLR_CYN,
    'white': CLR_WHT,
}

# what each kind of message is printed in, overridden by --color_* flags
prompt = CLR_MAG()
error = CLR_BRRED()
success = CLR_GRN()
notice = CLR_YLW()
heading = CLR_BRYLW()


def get_color(value):
    if value is None:
        return CLR_NRM()
    if value in COLOR_NAMES:
        return COLOR_NAMES[value]()
    return None
