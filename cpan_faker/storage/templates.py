"""
Front-matter templates for the generated index files.

Rendered with Jinja2; the environment is built once at import and never changes.
"""
from __future__ import annotations

from jinja2 import DictLoader, Environment, StrictUndefined

PACKAGES_TEMPLATE = """\
File:         02packages.details.txt
URL:          {{ url }}modules/02packages.details.txt.gz
Description:  Package names found in directory $CPAN/authors/id/
Columns:      package name, version, path
Intended-For: Automated fetch routines, namespace documentation.
Written-By:   cpan-faker version {{ generator_version }}
Line-Count:   {{ lines }}
Last-Updated: {{ timestamp }}
"""

MODLIST_TEMPLATE = """\
File:        03modlist.data
Description: cpan-faker does not provide modlist data.
Modcount:    0
Written-By:  cpan-faker version {{ generator_version }}
Date:        {{ timestamp }}

package CPAN::Modulelist;
# Usage: print Data::Dumper->new([CPAN::Modulelist->data])->Dump or similar
# cannot 'use strict', because we normally run under Safe
# use strict;
sub data {
my $result = {};
my $primary = "modid";
for (@$CPAN::Modulelist::data){
my %hash;
@hash{@$CPAN::Modulelist::cols} = @$_;
$result->{$hash{$primary}} = \\%hash;
}
$result;
}
$CPAN::Modulelist::cols = [
'modid',
'statd',
'stats',
'statl',
'stati',
'statp',
'description',
'userid',
'chapterid'
];
$CPAN::Modulelist::data = [];
"""

TEMPLATES = {
    "packages": PACKAGES_TEMPLATE,
    "modlist": MODLIST_TEMPLATE,
}

_env = Environment(
    loader=DictLoader(TEMPLATES),
    keep_trailing_newline=True,
    undefined=StrictUndefined,
    autoescape=False,
)


def render(name: str, **context) -> str:
    """Render the named front-matter template."""
    return _env.get_template(name).render(**context)
