import logging


logger = logging.getLogger(__name__)


class Dependency:
    '''This makes the relation between fields possible.

    In practice this class allows to write something like

        class Simple(Structure):
            length = fields.StructField('I')
            data = fields.StringField(Dependency('.length'))

    and have the (internal) length of the string contained in the field named 'data'
    strictly connected to the field named 'length': unpacking reads the length from it,
    setting a new value on 'data' writes the new length back.

    The expression starts with '.' and is resolved from the father of the field,
    like a relative import.
    '''
    def __init__(self, expression):
        if not expression.startswith('.'):
            raise ValueError(f'the expression \'{expression}\' must be relative, i.e. start with \'.\'')

        self.expression = expression

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression})>'

    def resolve_field(self, instance):
        '''Return the field the expression points to with respect to the instance passed.'''
        # '.length'.split(".") -> ['', 'length']
        fields_path = self.expression.split('.')[1:]

        field = instance.father
        if field is None:
            raise AttributeError(f'{self!r} can\'t be resolved for a field without father')

        for component_name in fields_path:
            field = getattr(field, component_name)

        logger.debug('%r resolved as field %s' % (self, field.__class__.__name__))

        return field

    def resolve(self, instance):
        return self.resolve_field(instance).value

    def resolve_and_set(self, instance, value):
        self.resolve_field(instance).value = value
